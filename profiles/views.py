from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import ProfileSerializer
from .services import ensure_profile, resolve_display_name


class ProfileMeView(APIView):
    """The caller's own profile, created on first access."""

    def get(self, request):
        profile = ensure_profile(request.user_id, request.user_email)
        return Response(ProfileSerializer(profile).data)

    def patch(self, request):
        profile = ensure_profile(request.user_id, request.user_email)
        serializer = ProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class DisplayNameView(APIView):
    def get(self, request, user_id):
        return Response({
            'user_id': user_id,
            'display_name': resolve_display_name(user_id),
        })
