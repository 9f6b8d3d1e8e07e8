"""
Local MQTT notification sink for alertfeed.

Publishes each notification as a JSON message to a local broker
so that home automation can pick it up.
"""

import json
import time
from aiomqtt import Client
from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.notify.mqtt")

class MqttNotificationSink:
    """로컬 MQTT 알림 싱크"""
    
    def __init__(self,
                 *,
                 broker_host: str,
                 broker_port: int,
                 topic: str,
                 username: str | None = None,
                 password: str | None = None,
                 qos: int = 1,
                 retain: bool = False,
                 enabled: bool = True):
        """
        초기화합니다.
        
        Args:
            broker_host: MQTT 브로커 호스트
            broker_port: MQTT 브로커 포트
            topic: 발송 토픽
            username: 사용자명
            password: 비밀번호
            qos: QoS
            retain: retain 플래그
            enabled: 알림 허용 여부
        """
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic = topic
        self.username = username
        self.password = password
        self.qos = qos
        self.retain = retain
        self.enabled = enabled
    
    async def is_permitted(self) -> bool:
        return self.enabled
    
    def build_payload(self, title: str, body: str) -> bytes:
        return json.dumps(
            {"title": title, "body": body, "ts": int(time.time())},
            ensure_ascii=False
        ).encode("utf-8")
    
    async def notify(self, title: str, body: str) -> None:
        """MQTT 브로커로 알림을 발행합니다."""
        async with Client(
            hostname=self.broker_host,
            port=self.broker_port,
            username=self.username,
            password=self.password,
        ) as client:
            await client.publish(self.topic, self.build_payload(title, body), qos=self.qos, retain=self.retain)
        log.info("MQTT 알림 발행됨", topic=self.topic, title=title)
