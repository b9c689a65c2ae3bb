from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import CheckoutSerializer, OrderSerializer


class OrderListView(APIView):
    """The caller's orders, and checkout of the current cart"""

    def get(self, request):
        orders = services.list_orders(request.user_id)
        return Response({
            'results': OrderSerializer(orders, many=True).data,
            'total_count': len(orders)
        })

    def post(self, request):
        data = CheckoutSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        order = services.checkout(request.user_id, data.validated_data['shipping_address'])
        order = services.get_order(request.user_id, order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    def get(self, request, order_id):
        return Response(OrderSerializer(services.get_order(request.user_id, order_id)).data)
