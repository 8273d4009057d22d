"""
배송 규칙 가져오기 Management Command

JSON 파일(규칙 문서 목록)을 읽어 배송 규칙과 서비스 옵션을 생성합니다.
잘못된 문서는 건너뛰고 계속 진행합니다.

사용 예시:
    python manage.py import_shipping_rules rules.json
    python manage.py import_shipping_rules rules.json --replace
    python manage.py import_shipping_rules rules.json --dry-run
"""

import json
import logging
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from shipping.models import ShippingRule
from shipping.services import ConfigurationError, RuleStore

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "JSON 파일에서 배송 규칙을 가져옵니다"

    def add_arguments(self, parser):
        parser.add_argument("path", type=str, help="규칙 문서 목록 JSON 파일 경로")
        parser.add_argument(
            "--replace",
            action="store_true",
            help="가져오기 전에 기존 규칙을 모두 삭제",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="실제 저장하지 않고 검증 결과만 출력",
        )

    def load_documents(self, path: Path) -> list:
        try:
            with path.open(encoding="utf-8") as fp:
                documents = json.load(fp)
        except FileNotFoundError as e:
            raise CommandError(f"파일을 찾을 수 없습니다: {path}") from e
        except json.JSONDecodeError as e:
            raise CommandError(f"JSON 형식이 올바르지 않습니다: {e}") from e

        if isinstance(documents, dict):
            documents = documents.get("rules", [documents])
        if not isinstance(documents, list):
            raise CommandError("규칙 문서 목록(JSON 배열)이 필요합니다.")
        return documents

    def handle(self, *args, **options):
        path = Path(options["path"])
        replace = options["replace"]
        dry_run = options["dry_run"]

        documents = self.load_documents(path)

        self.stdout.write(self.style.WARNING(f"=== 배송 규칙 가져오기 {'(DRY RUN)' if dry_run else ''} ==="))
        self.stdout.write(f"파일: {path}")
        self.stdout.write(f"문서 수: {len(documents)}개")
        self.stdout.write("")

        valid_rules = []  # (문서 순번, 규칙, 문서에 id가 있었는지)
        skipped = 0
        for index, document in enumerate(documents):
            try:
                rule = RuleStore.rule_from_document(document, default_id=f"import-{index}")
            except ConfigurationError as e:
                skipped += 1
                logger.warning(
                    "[import_shipping_rules] 문서 건너뜀 | index=%d, message=%s, details=%s",
                    index,
                    e.message,
                    e.details,
                )
                self.stdout.write(self.style.ERROR(f"✗ #{index}: {e.message}"))
                continue
            has_own_id = bool(str(document.get("id") or "").strip())
            valid_rules.append((index, rule, has_own_id))
            self.stdout.write(f"✓ #{index}: {rule.zone} (옵션 {len(rule.options)}개)")

        self.stdout.write("")
        existing_count = ShippingRule.objects.count()

        if dry_run:
            if replace:
                self.stdout.write(f"삭제 예정 기존 규칙: {existing_count}개")
            self.stdout.write(f"가져오기 가능: {len(valid_rules)}개, 건너뜀: {skipped}개")
            self.stdout.write(self.style.WARNING("DRY RUN 모드: 실제로 저장하지 않았습니다."))
            return

        created = 0
        with transaction.atomic():
            if replace:
                ShippingRule.objects.all().delete()
                self.stdout.write(f"기존 규칙 삭제: {existing_count}개")
            for index, rule, has_own_id in valid_rules:
                try:
                    RuleStore.create_rule(rule, keep_id=has_own_id)
                except ConfigurationError as e:
                    skipped += 1
                    logger.warning(
                        "[import_shipping_rules] 규칙 건너뜀 | index=%d, message=%s, details=%s",
                        index,
                        e.message,
                        e.details,
                    )
                    self.stdout.write(self.style.ERROR(f"✗ #{index}: {e.message} ({rule.id})"))
                    continue
                created += 1

        logger.info(
            "[import_shipping_rules] 가져오기 완료 | created=%d, skipped=%d, replace=%s",
            created,
            skipped,
            replace,
        )
        self.stdout.write(self.style.SUCCESS(f"✓ {created}개 규칙 생성, {skipped}개 건너뜀"))
