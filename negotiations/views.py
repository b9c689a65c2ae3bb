from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from products.models import Product
from . import services
from .serializers import NegotiationSerializer, ProposePriceSerializer


class NegotiationListView(APIView):
    """Offers received (``?role=seller``, default) or made (``?role=buyer``), and making a new offer"""

    def get(self, request):
        role = request.GET.get('role', 'seller')
        negotiations = services.list_negotiations(request.user_id, role)
        serializer = NegotiationSerializer(negotiations, many=True)
        return Response({
            'role': role,
            'results': serializer.data,
            'total_count': len(negotiations)
        })

    def post(self, request):
        data = ProposePriceSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        product = Product.objects.get(pk=data.validated_data['product_id'])
        negotiation = services.propose_price(
            product.pk,
            request.user_id,
            product.seller_id,
            product.price,
            data.validated_data['proposed_price'],
            data.validated_data['message'],
        )
        return Response(NegotiationSerializer(negotiation).data, status=status.HTTP_201_CREATED)


class ResolveNegotiationView(APIView):
    decision = None

    def post(self, request, negotiation_id):
        negotiation = services.resolve_negotiation(negotiation_id, self.decision, request.user_id)
        return Response({
            'success': True,
            'negotiation': NegotiationSerializer(negotiation).data
        })


class AcceptNegotiationView(ResolveNegotiationView):
    decision = services.ACCEPT


class RejectNegotiationView(ResolveNegotiationView):
    decision = services.REJECT
