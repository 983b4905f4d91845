# -*- coding: utf-8 -*-
"""
業務例外 - 由服務層拋出，main.py 統一轉成 JSON 回應
"""


class ClinicError(Exception):
    """業務錯誤基底"""
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(ClinicError):
    """病人或就診紀錄不存在"""
    status_code = 404


class Conflict(ClinicError):
    """身分證號重複、就診序號重複"""
    status_code = 409


class InvalidState(ClinicError):
    """狀態不允許此操作（例如重複標記已付款）"""
    status_code = 400


class InvalidArgument(ClinicError):
    """參數不合法"""
    status_code = 400
