from app.models import Notification, NotificationType, UserRole
from app.services.notification_service import NotificationService


def test_fan_out_reaches_active_admins_and_owner(session, build):
    first_admin = build.user(role=UserRole.ADMIN)
    second_admin = build.user(role=UserRole.ADMIN)
    build.user(role=UserRole.ADMIN, is_active=False)
    owner = build.user()

    written = NotificationService(session).notify_admins_and_owner(
        "Proposal PRP-1 was accepted", NotificationType.PROPOSAL_ACCEPTED, owner.id
    )

    assert written == 3
    rows = {row.recipient_id: row.recipient_role for row in session.query(Notification).all()}
    assert rows == {first_admin.id: "admin", second_admin.id: "admin", owner.id: "user"}


def test_fan_out_does_not_duplicate_admin_owner(session, build):
    admin = build.user(role=UserRole.ADMIN)

    written = NotificationService(session).notify_admins_and_owner(
        "Proposal PRP-1 was sent", NotificationType.PROPOSAL_SENT, admin.id
    )

    assert written == 1


def test_list_for_recipient_filters_unread(session, build):
    user = build.user()
    service = NotificationService(session)
    first = service.send_notification("one", NotificationType.PROPOSAL_SENT, user.id, "user")
    service.send_notification("two", NotificationType.PROPOSAL_VIEWED, user.id, "user")
    first.is_read = True
    session.commit()

    assert len(service.list_for_recipient(user.id)) == 2
    assert [row.message for row in service.list_for_recipient(user.id, unread_only=True)] == ["two"]
