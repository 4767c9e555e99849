from django.db import models


class ActivityLog(models.Model):
    user = models.ForeignKey(
        "accounts.User",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="activity_logs",
    )
    action = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user"], name="activity_log_user_idx"),
            models.Index(fields=["action"], name="activity_log_action_idx"),
        ]

    def __str__(self):
        who = self.user.email if self.user_id else "anonymous"
        return f"{who}: {self.action}"
