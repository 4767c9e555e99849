# apps/accounts/templatetags/group_tags.py
from django import template

register = template.Library()


@register.filter
def in_group(user, group_name):
    if not getattr(user, "is_authenticated", False):
        return False
    return user.groups.filter(name__iexact=group_name).exists()
