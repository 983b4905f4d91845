# -*- coding: utf-8 -*-
"""
登記就診、免費額度、付款狀態
"""

from datetime import datetime, timedelta

import pytest

from app.exceptions import Conflict, InvalidState, NotFound
from app.models import AuditLog, AuditAction, Patient, Visit
from app.services import quota
from app.services import visits as visit_service

NOW = datetime(2026, 3, 15, 10, 30)


def _record(db, patient, user, times=1, start=NOW, **kwargs):
    results = []
    for i in range(times):
        results.append(
            visit_service.record_visit(
                db, patient.id, user, now=start + timedelta(minutes=i), **kwargs
            )
        )
    return results


def test_sequential_visits_keep_counter_and_numbers_in_sync(db, staff, make_patient):
    patient = make_patient()

    _record(db, patient, staff, times=6)

    db.refresh(patient)
    assert patient.visit_count == 6
    numbers = [v.visit_number for v in db.query(Visit).filter(Visit.patient_id == patient.id)]
    assert sorted(numbers) == [1, 2, 3, 4, 5, 6]


def test_first_three_visits_of_month_are_free_then_billable(db, staff, make_patient):
    patient = make_patient(charges=450)

    results = _record(db, patient, staff, times=4)
    visits = [visit for visit, _ in results]

    for visit in visits[:3]:
        assert visit.is_free_visit is True
        assert visit.charges == 0
        assert visit.paid is True

    fourth = visits[3]
    assert fourth.is_free_visit is False
    assert fourth.paid is False
    assert fourth.charges == 450


def test_requested_charge_overrides_default_for_billable_visit(db, staff, make_patient):
    patient = make_patient(charges=450)
    _record(db, patient, staff, times=3)

    visit, _ = visit_service.record_visit(db, patient.id, staff, charges=800, now=NOW + timedelta(hours=1))
    assert visit.charges == 800

    waived, _ = visit_service.record_visit(db, patient.id, staff, charges=0, now=NOW + timedelta(hours=2))
    assert waived.charges == 0
    assert waived.is_free_visit is False
    assert waived.paid is False


def test_requested_charge_is_ignored_for_free_visit(db, staff, make_patient):
    patient = make_patient()
    visit, _ = visit_service.record_visit(db, patient.id, staff, charges=999, now=NOW)
    assert visit.charges == 0


def test_billable_visit_without_any_charge_is_zero(db, staff, make_patient):
    patient = make_patient(charges=0)
    results = _record(db, patient, staff, times=4)
    assert results[3][0].charges == 0
    assert results[3][0].paid is False


def test_remaining_free_visits_summary(db, staff, make_patient):
    patient = make_patient()
    results = _record(db, patient, staff, times=4)
    summaries = [summary for _, summary in results]

    assert summaries[1]["monthly_visit_count"] == 2
    assert summaries[1]["remaining_free_visits"] == 1
    assert summaries[3]["monthly_visit_count"] == 4
    assert summaries[3]["remaining_free_visits"] == 0
    assert summaries[3]["visit_count"] == 4


def test_free_quota_resets_each_month_but_visit_number_continues(db, staff, make_patient):
    patient = make_patient()
    _record(db, patient, staff, times=4, start=datetime(2026, 2, 20, 9, 0))

    visit, summary = visit_service.record_visit(db, patient.id, staff, now=NOW)

    assert visit.visit_number == 5
    assert visit.is_free_visit is True
    assert summary["monthly_visit_count"] == 1
    assert summary["remaining_free_visits"] == 2


def test_imported_counter_seed_does_not_affect_free_quota(db, staff, make_patient):
    patient = make_patient(visit_count=10)

    visit, summary = visit_service.record_visit(db, patient.id, staff, now=NOW)

    assert visit.visit_number == 11
    assert visit.is_free_visit is True
    assert summary["visit_count"] == 11
    assert summary["monthly_visit_count"] == 1


def test_record_visit_for_missing_patient(db, staff):
    with pytest.raises(NotFound):
        visit_service.record_visit(db, 9999, staff, now=NOW)
    assert db.query(Visit).count() == 0


def test_duplicate_visit_number_is_rejected_and_counter_rolled_back(db, staff, make_patient):
    patient = make_patient()
    # 模擬另一個請求已寫入相同序號
    db.add(Visit(patient_id=patient.id, visit_number=1, created_by=staff.id, created_at=NOW))
    db.commit()

    with pytest.raises(Conflict):
        visit_service.record_visit(db, patient.id, staff, now=NOW)

    assert db.get(Patient, patient.id, populate_existing=True).visit_count == 0
    assert db.query(Visit).filter(Visit.patient_id == patient.id).count() == 1


def test_record_visit_writes_audit_log(db, staff, make_patient):
    patient = make_patient()
    visit, _ = visit_service.record_visit(db, patient.id, staff, notes="fever", now=NOW)

    log = db.query(AuditLog).filter(AuditLog.action == AuditAction.VISIT_RECORD.value).one()
    assert log.target_id == visit.id
    assert log.user_id == staff.id
    assert visit.notes == "fever"
    assert visit.created_by == staff.id


# ======================
# 當月查詢
# ======================

def test_current_month_window_boundaries(db, staff, make_patient):
    patient = make_patient()
    for moment in (
        datetime(2026, 2, 28, 23, 59, 59),
        datetime(2026, 3, 1, 0, 0, 0),
        datetime(2026, 3, 31, 23, 59, 59),
        datetime(2026, 4, 1, 0, 0, 0),
    ):
        visit_service.record_visit(db, patient.id, staff, now=moment)

    assert quota.count_visits_in_current_month(db, patient.id, NOW) == 2
    listed = quota.list_visits_in_current_month(db, patient.id, NOW)
    assert [v.created_at for v in listed] == [
        datetime(2026, 3, 1, 0, 0, 0),
        datetime(2026, 3, 31, 23, 59, 59),
    ]


def test_visit_overview(db, staff, make_patient):
    patient = make_patient()
    _record(db, patient, staff, times=2, start=datetime(2026, 1, 5))
    _record(db, patient, staff, times=2, start=NOW)
    db.refresh(patient)

    overview = visit_service.get_visit_overview(db, patient, NOW)

    assert [v.visit_number for v in overview["visits"]] == [4, 3, 2, 1]
    assert [v.visit_number for v in overview["current_month_visits"]] == [3, 4]
    assert overview["summary"] == {
        "visit_count": 4,
        "monthly_visit_count": 2,
        "remaining_free_visits_this_month": 1,
    }


# ======================
# 付款
# ======================

def test_mark_billable_visit_paid(db, staff, make_patient):
    patient = make_patient()
    results = _record(db, patient, staff, times=4)
    billable = results[3][0]

    paid = visit_service.mark_visit_paid(db, billable.id, actor=staff)
    assert paid.paid is True

    with pytest.raises(InvalidState):
        visit_service.mark_visit_paid(db, billable.id, actor=staff)


def test_mark_already_paid_visit_does_not_touch_updated_at(db, staff, make_patient):
    patient = make_patient()
    visit, _ = visit_service.record_visit(db, patient.id, staff, now=NOW)
    before = visit.updated_at

    with pytest.raises(InvalidState):
        visit_service.mark_visit_paid(db, visit.id, actor=staff)

    db.refresh(visit)
    assert visit.updated_at == before
    assert visit.paid is True


def test_mark_missing_visit_paid(db, staff):
    with pytest.raises(NotFound):
        visit_service.mark_visit_paid(db, 12345, actor=staff)


def test_update_visit_changes_only_charges_and_notes(db, staff, make_patient):
    patient = make_patient()
    results = _record(db, patient, staff, times=4)
    billable = results[3][0]

    updated = visit_service.update_visit(
        db, billable.id, {"charges": 120, "notes": "discount", "paid": True}, actor=staff
    )

    assert updated.charges == 120
    assert updated.notes == "discount"
    assert updated.paid is False


def test_free_visit_charge_stays_zero(db, staff, make_patient):
    patient = make_patient(charges=500)
    visit, _ = _record(db, patient, staff)[0]
    assert visit.is_free_visit is True

    with pytest.raises(InvalidState):
        visit_service.update_visit(db, visit.id, {"charges": 500}, actor=staff)

    db.expire_all()
    stored = db.get(Visit, visit.id)
    assert stored.charges == 0
    assert stored.paid is True

    updated = visit_service.update_visit(
        db, visit.id, {"charges": 0, "notes": "follow-up"}, actor=staff
    )
    assert updated.charges == 0
    assert updated.notes == "follow-up"
