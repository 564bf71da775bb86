from src.client.notifications import Notification, NotificationLevel, Notifier


def test_listeners_receive_notifications_until_unsubscribed():
    notifier = Notifier()
    received: list[Notification] = []
    unsubscribe = notifier.subscribe(received.append)

    notifier.success("Saved", "Grant saved")
    unsubscribe()
    notifier.error("Failed")

    assert received == [Notification(NotificationLevel.SUCCESS, "Saved", "Grant saved")]
    assert [n.level for n in notifier.history] == [
        NotificationLevel.SUCCESS,
        NotificationLevel.ERROR,
    ]


def test_history_is_bounded():
    notifier = Notifier(history_size=2)

    for title in ("one", "two", "three"):
        notifier.info(title)

    assert [n.title for n in notifier.history] == ["two", "three"]
