from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import AddToCartSerializer, CartItemSerializer, QuantitySerializer


def _cart_response(user_id, status_code=status.HTTP_200_OK):
    items = services.cart_items(user_id)
    return Response({
        'results': CartItemSerializer(items, many=True).data,
        'item_count': sum(item.quantity for item in items),
        'total': str(services.cart_total(items)),
    }, status=status_code)


class CartView(APIView):
    """The caller's cart: view it, add a product, or empty it"""

    def get(self, request):
        return _cart_response(request.user_id)

    def post(self, request):
        data = AddToCartSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        item, created = services.add_to_cart(
            request.user_id,
            data.validated_data['product_id'],
            data.validated_data['quantity'],
            data.validated_data['negotiation_id'],
        )
        return Response(
            CartItemSerializer(item).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def delete(self, request):
        services.clear_cart(request.user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CartItemView(APIView):
    def patch(self, request, item_id):
        data = QuantitySerializer(data=request.data)
        data.is_valid(raise_exception=True)
        item = services.update_quantity(request.user_id, item_id, data.validated_data['quantity'])
        return Response(CartItemSerializer(item).data)

    def delete(self, request, item_id):
        services.remove_from_cart(request.user_id, item_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
