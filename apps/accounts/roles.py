import logging

from django.contrib.auth.models import Group

logger = logging.getLogger(__name__)

# Vai trò trong hệ thống (tên Group)
ADMIN = "Admin"
CBGV = "CBGV"  # Cán bộ giảng viên
SINH_VIEN = "SinhVien"

ROLES = (ADMIN, CBGV, SINH_VIEN)


def seed_roles(role_names=ROLES):
    """Tạo các Group vai trò còn thiếu; trả về danh sách vai trò vừa tạo."""
    created_roles = []
    for name in role_names:
        if Group.objects.filter(name=name).exists():
            logger.debug("Role already exists: %s", name)
            continue
        Group.objects.create(name=name)
        created_roles.append(name)
        print(f"✓ {name} role created!")
    return created_roles


def assign_role(user, role_name):
    group = Group.objects.get(name=role_name)
    user.groups.add(group)
    return group
