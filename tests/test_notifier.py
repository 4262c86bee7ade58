"""事件通知测试"""

import unittest
from unittest.mock import MagicMock

import requests

from basable.db.types import (
    NotifyEvent,
    NotifyEventMethod,
    NotifyTrigger,
    NotifyTriggerTime,
    OnNotifyError,
    TableConfig,
)
from basable.errors import NotifyError
from basable.monitor.notifier import EventNotifier


def make_config(*events: NotifyEvent) -> TableConfig:
    return TableConfig(label="users", name="users", events=list(events))


class TestEventNotifier(unittest.TestCase):
    """通知器测试类"""

    def setUp(self):
        self.session = MagicMock(spec=requests.Session)
        self.session.request.return_value.status_code = 200
        self.notifier = EventNotifier(timeout=3, session=self.session)

    def test_no_config_sends_nothing(self):
        self.notifier.notify(None, NotifyTrigger.CREATE, NotifyTriggerTime.AFTER)
        self.notifier.notify(TableConfig(name="users"), NotifyTrigger.CREATE, NotifyTriggerTime.AFTER)
        self.session.request.assert_not_called()

    def test_only_matching_events_fire(self):
        config = make_config(
            NotifyEvent(NotifyTrigger.CREATE, NotifyTriggerTime.AFTER, NotifyEventMethod.POST, "https://a"),
            NotifyEvent(NotifyTrigger.CREATE, NotifyTriggerTime.BEFORE, NotifyEventMethod.POST, "https://b"),
            NotifyEvent(NotifyTrigger.DELETE, NotifyTriggerTime.AFTER, NotifyEventMethod.POST, "https://c"),
        )

        self.notifier.notify(config, NotifyTrigger.CREATE, NotifyTriggerTime.AFTER, {"name": "Ada"})

        self.assertEqual(self.session.request.call_count, 1)
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("POST", "https://a"))
        self.assertEqual(kwargs["timeout"], 3)
        payload = kwargs["json"]
        self.assertEqual(payload["table"], "users")
        self.assertEqual(payload["trigger"], "Create")
        self.assertEqual(payload["trigger_time"], "After")
        self.assertEqual(payload["data"], {"name": "Ada"})

    def test_get_sends_query_params(self):
        config = make_config(
            NotifyEvent(NotifyTrigger.UPDATE, NotifyTriggerTime.BEFORE, NotifyEventMethod.GET, "https://g"),
        )

        self.notifier.notify(config, NotifyTrigger.UPDATE, NotifyTriggerTime.BEFORE)

        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("GET", "https://g"))
        self.assertEqual(kwargs["params"], {"table": "users", "trigger": "Update"})

    def test_fail_policy_raises(self):
        self.session.request.return_value.status_code = 500
        config = make_config(
            NotifyEvent(NotifyTrigger.DELETE, NotifyTriggerTime.BEFORE, NotifyEventMethod.POST,
                        "https://d", OnNotifyError.FAIL),
        )

        with self.assertRaises(NotifyError):
            self.notifier.notify(config, NotifyTrigger.DELETE, NotifyTriggerTime.BEFORE)

    def test_fail_policy_wraps_transport_errors(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        config = make_config(
            NotifyEvent(NotifyTrigger.DELETE, NotifyTriggerTime.BEFORE, NotifyEventMethod.PUT,
                        "https://d", OnNotifyError.FAIL),
        )

        with self.assertRaises(NotifyError) as ctx:
            self.notifier.notify(config, NotifyTrigger.DELETE, NotifyTriggerTime.BEFORE)
        self.assertIsInstance(ctx.exception.cause, requests.ConnectionError)

    def test_proceed_policy_swallows_failure(self):
        self.session.request.side_effect = requests.Timeout("slow")
        config = make_config(
            NotifyEvent(NotifyTrigger.CREATE, NotifyTriggerTime.AFTER, NotifyEventMethod.POST, "https://p"),
            NotifyEvent(NotifyTrigger.CREATE, NotifyTriggerTime.AFTER, NotifyEventMethod.POST, "https://q"),
        )

        self.notifier.notify(config, NotifyTrigger.CREATE, NotifyTriggerTime.AFTER)

        self.assertEqual(self.session.request.call_count, 2)


if __name__ == '__main__':
    unittest.main()
