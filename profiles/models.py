from django.db import models


class Profile(models.Model):
    user_id = models.CharField(max_length=100, unique=True)
    full_name = models.CharField(max_length=255, blank=True, default='')
    email = models.EmailField(max_length=255, null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    is_seller = models.BooleanField(default=False)
    address = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles'
        indexes = [
            models.Index(fields=['email'], name='profiles_email_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.user_id})"
