from django.conf import settings
from django.db import models


class PlatformSetting(models.Model):
    """Admin-editable key/value configuration (margin defaults, fallback pricing, branding)."""
    key = models.CharField(max_length=64, primary_key=True)
    value = models.TextField(blank=True, default='')
    description = models.CharField(max_length=255, blank=True, default='')
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']

    def __str__(self):
        return f"{self.key}={self.value}"
