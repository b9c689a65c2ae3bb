from rest_framework import serializers
from .models import Profile


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ['user_id', 'full_name', 'email', 'phone', 'is_seller', 'address', 'created_at', 'updated_at']
        read_only_fields = ['user_id', 'email', 'created_at', 'updated_at']

    def validate_full_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Full name cannot be empty.")
        return value.strip()
