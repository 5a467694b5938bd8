from __future__ import annotations

import argparse
import asyncio
import json

from push_relay.core.config import settings
from push_relay.core.firebase import initialize_firebase
from push_relay.core.logging_config import configure_logging
from push_relay.services.dispatch_service import dispatch_push
from push_relay.services.fcm_service import FcmSender
from push_relay.services.message_template import get_default_message


def main() -> None:
    parser = argparse.ArgumentParser(description="FCM 발송 연동 점검 스크립트")
    parser.add_argument("--template", action="store_true", help="기본 메시지 템플릿 출력")
    parser.add_argument("--send", nargs="+", metavar="TOKEN", help="지정한 토큰으로 테스트 발송")
    parser.add_argument("--count", type=int, default=1, help="토큰당 메시지 수 (기본 1)")
    parser.add_argument("--message", metavar="JSON", help="기본 템플릿에 덮어쓸 메시지 JSON")
    args = parser.parse_args()

    configure_logging(settings.log_level)

    if args.template:
        print(json.dumps(get_default_message(), ensure_ascii=False, indent=2))

    if args.send:
        firebase = initialize_firebase(settings)
        sender = FcmSender(firebase.app) if firebase.ready else None
        payload = {"tokens": args.send, "messagesPerToken": args.count}
        if args.message:
            payload["message"] = json.loads(args.message)

        report = asyncio.run(dispatch_push(sender, payload))
        summary = report.summary
        print(
            "발송 완료:",
            f"total={summary.total_messages}",
            f"success={summary.success_count}",
            f"failure={summary.failure_count}",
        )
        for outcome in report.results:
            if not outcome.success:
                print(" 실패", outcome.token[:16], outcome.message_index, outcome.error.code, outcome.error.message)


if __name__ == "__main__":
    main()
