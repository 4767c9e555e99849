# apps/common/management/commands/seed_db.py
from django.core.management.base import BaseCommand, CommandError

from apps.common.bootstrap import run_startup_seed


class Command(BaseCommand):
    help = (
        "Seed database with default roles (Admin, CBGV, SinhVien), demo accounts "
        "with staff/student profiles, and organizational units. "
        "Without flags only missing migrations are applied and existing data is kept; "
        "with --reset the database is dropped and recreated first."
    )

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--reset",
            dest="reset",
            action="store_true",
            default=False,
            help="Xóa toàn bộ bảng và tạo lại schema trước khi seed",
        )
        group.add_argument(
            "--no-reset",
            dest="reset",
            action="store_false",
            help="Mặc định: chỉ áp dụng migration còn thiếu rồi seed (giữ dữ liệu cũ)",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("--- Starting Database Seeding ---"))
        result = run_startup_seed(reset=options["reset"])
        if not result.ok:
            raise CommandError(f"Seeding failed: {result.error_type}: {result.error}")

        summary = result.summary.as_dict()
        self.stdout.write(
            self.style.SUCCESS(
                "Seeding completed: "
                + ", ".join(f"{key}={value}" for key, value in summary.items())
            )
        )
