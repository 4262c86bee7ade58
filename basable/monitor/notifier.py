"""
表事件通知

根据 TableConfig 中配置的 NotifyEvent，在增删改前后调用 webhook。
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from ..db.types import (
    NotifyEvent,
    NotifyEventMethod,
    NotifyTrigger,
    NotifyTriggerTime,
    OnNotifyError,
    TableConfig,
)
from ..errors import NotifyError


class EventNotifier:
    """webhook 事件通知器"""

    def __init__(self, timeout: int = 5, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def matching_events(self, config: Optional[TableConfig], trigger: NotifyTrigger,
                        trigger_time: NotifyTriggerTime) -> List[NotifyEvent]:
        """找出与动作和时机匹配的事件"""
        if config is None or not config.events:
            return []
        return [
            e for e in config.events
            if e.trigger == trigger and e.trigger_time == trigger_time
        ]

    def notify(self, config: Optional[TableConfig], trigger: NotifyTrigger,
               trigger_time: NotifyTriggerTime, data: Optional[Dict[str, Any]] = None) -> None:
        """
        发送匹配的事件

        Raises:
            NotifyError: 事件发送失败且 on_error 为 Fail
        """
        for event in self.matching_events(config, trigger, trigger_time):
            payload = {
                'table': config.name,
                'trigger': trigger.value,
                'trigger_time': trigger_time.value,
                'data': data or {},
                'timestamp': datetime.now().isoformat(),
            }
            self._send(event, payload)

    def _send(self, event: NotifyEvent, payload: Dict[str, Any]) -> None:
        method = event.method.value.upper()
        try:
            if event.method == NotifyEventMethod.GET:
                response = self.session.request(
                    method, event.url,
                    params={'table': payload['table'], 'trigger': payload['trigger']},
                    timeout=self.timeout
                )
            else:
                response = self.session.request(method, event.url, json=payload, timeout=self.timeout)

            if response.status_code >= 400:
                raise NotifyError(f"webhook {event.url} returned {response.status_code}")

            logger.debug(f"Notified {method} {event.url} for {payload['table']}:{payload['trigger']}")

        except (requests.RequestException, NotifyError) as e:
            if event.on_error == OnNotifyError.FAIL:
                logger.error(f"Notify event failed: {e}")
                if isinstance(e, NotifyError):
                    raise
                raise NotifyError(f"webhook {event.url} failed: {e}", e) from e

            logger.warning(f"Notify event failed, proceeding: {e}")
