from django.db import models


class StoredValue(models.Model):
    """One entry of the editor's local key-value store."""
    key = models.CharField(max_length=1024, primary_key=True)
    value = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']

    def __str__(self):
        return self.key
