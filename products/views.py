from django.db.models import Q
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from rest_framework.views import APIView

from profiles.services import resolve_display_names
from .models import Product, Review
from .serializers import ProductInputSerializer, ProductSerializer, ReviewInputSerializer, ReviewSerializer
from .services import create_product, delete_product, review_summary, submit_review, update_product


class ProductListView(generics.ListAPIView):
    """Browse products, optionally filtered by category, seller or a search term; sellers list new ones"""
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get_queryset(self):
        queryset = Product.objects.all()
        category = self.request.GET.get('category')
        search = self.request.GET.get('search', '').strip()
        seller_id = self.request.GET.get('seller_id')

        if category:
            queryset = queryset.filter(category=category)
        if seller_id:
            queryset = queryset.filter(seller_id=seller_id)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
        return queryset

    def post(self, request):
        data = ProductInputSerializer(data=request.data)
        data.is_valid(raise_exception=True)
        product = create_product(request.user_id, data.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


class ProductDetailView(generics.RetrieveAPIView):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    queryset = Product.objects.all()

    def patch(self, request, pk):
        data = ProductInputSerializer(data=request.data, partial=True)
        data.is_valid(raise_exception=True)
        product = update_product(pk, request.user_id, data.validated_data)
        return Response(ProductSerializer(product).data)

    def delete(self, request, pk):
        delete_product(pk, request.user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductReviewsView(APIView):
    """List a product's reviews or submit the caller's review"""
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request, pk):
        product = Product.objects.get(pk=pk)
        reviews = list(Review.objects.filter(product=product))
        names = resolve_display_names(r.user_id for r in reviews)
        serializer = ReviewSerializer(reviews, many=True, context={'display_names': names})
        return Response({
            'product_id': product.pk,
            'results': serializer.data,
            **review_summary(product.pk),
        })

    def post(self, request, pk):
        data = ReviewInputSerializer(data=request.data)
        data.is_valid(raise_exception=True)

        review, created = submit_review(
            pk,
            request.user_id,
            data.validated_data['rating'],
            data.validated_data.get('comment', ''),
        )
        names = resolve_display_names([review.user_id])
        return Response(
            ReviewSerializer(review, context={'display_names': names}).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
