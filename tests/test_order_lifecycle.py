import pytest
from sqlalchemy.orm import sessionmaker

from eventhire.core.errors import ConcurrentUpdate, InvalidTransition, NotAuthorized, NotAvailable, NotFound
from eventhire.services import booking


def test_create_order_starts_pending_and_counts_transaction(db, customer, vendor_user, order_details):
    vendor = vendor_user.vendor_profile

    order = booking.create_order(db, customer, vendor.id, order_details())

    assert order.status == "pending"
    assert order.currency == "NGN"
    assert order.is_rated is False
    db.refresh(vendor)
    assert vendor.total_transactions == 1
    assert vendor.completed_transactions == 0


def test_full_lifecycle_increments_completed_once(db, customer, vendor_user, order_details):
    vendor = vendor_user.vendor_profile
    order = booking.create_order(db, customer, vendor.id, order_details())

    for status in ("confirmed", "in-progress", "completed"):
        order = booking.transition_order(db, order.id, vendor_user, status)

    db.refresh(vendor)
    assert order.status == "completed"
    assert vendor.completed_transactions == 1
    assert vendor.completion_rate == 100

    with pytest.raises(InvalidTransition):
        booking.transition_order(db, order.id, vendor_user, "cancelled")
    with pytest.raises(InvalidTransition):
        booking.transition_order(db, order.id, vendor_user, "completed")

    db.refresh(vendor)
    assert vendor.completed_transactions == 1


def test_cancelled_order_counts_but_never_completes(db, customer, vendor_user, order_details):
    vendor = vendor_user.vendor_profile
    order = booking.create_order(db, customer, vendor.id, order_details())

    order = booking.transition_order(db, order.id, customer, "cancelled", reason="Venue changed")

    assert order.cancellation_reason == "Venue changed"
    assert order.cancelled_by_id == customer.id
    assert order.cancelled_at is not None
    db.refresh(vendor)
    assert vendor.total_transactions == 1
    assert vendor.completed_transactions == 0
    assert vendor.completion_rate == 0


def test_skipping_a_state_is_rejected(db, customer, vendor_user, order_details):
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())

    with pytest.raises(InvalidTransition):
        booking.transition_order(db, order.id, vendor_user, "completed")

    db.refresh(order)
    assert order.status == "pending"


def test_customer_may_only_cancel(db, customer, vendor_user, order_details):
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())

    with pytest.raises(NotAuthorized):
        booking.transition_order(db, order.id, customer, "confirmed")


def test_outsider_cannot_transition_or_see(db, customer, vendor_user, make_user, order_details):
    stranger = make_user("user")
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())

    with pytest.raises(NotAuthorized):
        booking.transition_order(db, order.id, stranger, "cancelled")
    with pytest.raises(NotFound):
        booking.get_order_for_party(db, order.id, stranger)


def test_admin_may_drive_any_edge(db, customer, vendor_user, admin, order_details):
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())

    order = booking.transition_order(db, order.id, admin, "confirmed")

    assert order.status == "confirmed"


def test_only_users_book_vendors(db, vendor_user, make_user, order_details):
    other_vendor = make_user("vendor")

    with pytest.raises(NotAuthorized):
        booking.create_order(db, other_vendor, vendor_user.vendor_profile.id, order_details())


def test_unavailable_or_unapproved_vendor_cannot_be_hired(db, customer, make_user, order_details):
    busy = make_user("vendor", is_available=False)
    pending = make_user("vendor", approved=False)

    with pytest.raises(NotAvailable):
        booking.create_order(db, customer, busy.vendor_profile.id, order_details())
    with pytest.raises(NotAvailable):
        booking.create_order(db, customer, pending.vendor_profile.id, order_details())


def test_unknown_event_type_is_rejected(db, customer, vendor_user, order_details):
    with pytest.raises(NotFound):
        booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details(event_type_id=999))


# --------------------------
# Refund override
# --------------------------

def test_refund_is_admin_only_and_leaves_counters(db, completed_order, vendor_user, admin):
    vendor = vendor_user.vendor_profile

    with pytest.raises(NotAuthorized):
        booking.refund_order(db, completed_order.id, vendor_user)

    order = booking.refund_order(db, completed_order.id, admin)

    assert order.status == "refunded"
    db.refresh(vendor)
    assert vendor.total_transactions == 1
    assert vendor.completed_transactions == 1


def test_pending_order_cannot_be_refunded(db, customer, vendor_user, admin, order_details):
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())

    with pytest.raises(InvalidTransition):
        booking.refund_order(db, order.id, admin)


def test_list_orders_filters_by_party_and_status(db, customer, vendor_user, order_details):
    vendor_id = vendor_user.vendor_profile.id
    first = booking.create_order(db, customer, vendor_id, order_details())
    booking.create_order(db, customer, vendor_id, order_details(event_title="Naming ceremony"))
    booking.transition_order(db, first.id, vendor_user, "confirmed")

    rows, total = booking.list_orders(db, vendor_id=vendor_id)
    assert total == 2
    rows, total = booking.list_orders(db, user_id=customer.id, status="confirmed")
    assert total == 1
    assert rows[0].id == first.id


def test_stale_transition_is_rejected(db, engine, customer, vendor_user, order_details):
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())
    other = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        # second request has already read the order while it was pending
        stale = booking.get_order(other, order.id)
        assert stale.status == "pending"

        booking.transition_order(db, order.id, vendor_user, "confirmed")

        with pytest.raises(ConcurrentUpdate):
            booking.transition_order(other, order.id, vendor_user, "cancelled")
    finally:
        other.close()

    db.refresh(order)
    assert order.status == "confirmed"
