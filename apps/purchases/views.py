from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from .models import PurchaseRecord, PurchaseCredit
from .serializers import (
    PurchaseRecordSerializer,
    PurchaseRecordListSerializer,
    PurchaseCreditSerializer,
    CreditSummarySerializer,
    RestoreResultSerializer,
    # Input serializers
    StoreEventSerializer,
    RestoreInputSerializer,
    CreditFilterSerializer,
    CreditHistoryFilterSerializer,
    ConsumeInputSerializer,
)
from .services import LedgerService
from .permissions import IsStoreCollaborator
from .exceptions import (
    CreditAlreadyConsumedError,
    CreditNotFoundError,
    InvalidCreditAmountError,
    ProductNotFoundError,
    PurchaseRecordNotFoundError,
    CreditAlreadyConsumedAPIError,
    CreditNotFoundAPIError,
    InvalidCreditAmountAPIError,
    ProductNotFoundAPIError,
    PurchaseNotFoundError,
)


def get_ledger():
    """Ledger bound to the default database."""
    return LedgerService()


class PurchasePagination(PageNumberPagination):
    """Custom pagination for purchases."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PurchaseRecordViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for PurchaseRecord read operations.

    Records are only ever created by the store integration, see
    store_events and restore_purchases.

    list: Get all purchase records
    retrieve: Get a record with its credits
    """

    queryset = PurchaseRecord.objects.prefetch_related('credits')
    serializer_class = PurchaseRecordSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = PurchasePagination

    def get_serializer_class(self):
        if self.action == 'list':
            return PurchaseRecordListSerializer
        return PurchaseRecordSerializer


class CreditViewSet(viewsets.GenericViewSet):
    """
    ViewSet for credit queries and consumption.

    list: Available (unconsumed) credits, oldest first
    summary: Available credit count
    history: Credits consumed by a profile
    consume: Spend a credit for a profile
    """

    queryset = PurchaseCredit.objects.all()
    serializer_class = PurchaseCreditSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    @extend_schema(parameters=[CreditFilterSerializer])
    def list(self, request):
        """
        GET /api/purchases/credits/?report_area=career
        """
        filter_serializer = CreditFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        credits = get_ledger().available_credits(
            profile_id=params.get('profile'),
            report_area=params.get('report_area'),
        )
        serializer = PurchaseCreditSerializer(credits, many=True)
        return Response(serializer.data)

    @extend_schema(
        parameters=[CreditFilterSerializer],
        responses={200: CreditSummarySerializer},
    )
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """
        GET /api/purchases/credits/summary/?report_area=career
        """
        filter_serializer = CreditFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        report_area = filter_serializer.validated_data.get('report_area')

        ledger = get_ledger()
        count = ledger.available_credit_count(report_area=report_area)
        serializer = CreditSummarySerializer({
            'report_area': report_area,
            'available_count': count,
            'has_available_credits': count > 0,
        })
        return Response(serializer.data)

    @extend_schema(
        parameters=[CreditHistoryFilterSerializer],
        responses={200: PurchaseCreditSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def history(self, request):
        """
        GET /api/purchases/credits/history/?profile=<uuid>
        """
        filter_serializer = CreditHistoryFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        credits = get_ledger().credit_history(filter_serializer.validated_data['profile'])
        return Response(PurchaseCreditSerializer(credits, many=True).data)

    @extend_schema(
        request=ConsumeInputSerializer,
        responses={200: PurchaseCreditSerializer},
    )
    @action(detail=True, methods=['post'])
    def consume(self, request, pk=None):
        """
        Spend a credit for a profile.

        POST /api/purchases/credits/{id}/consume/
        Body: {"profile_id": "<uuid>"}
        """
        input_serializer = ConsumeInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            credit = get_ledger().consume(
                pk, input_serializer.validated_data['profile_id']
            )
        except CreditNotFoundError:
            raise CreditNotFoundAPIError()
        except CreditAlreadyConsumedError:
            raise CreditAlreadyConsumedAPIError()

        return Response(PurchaseCreditSerializer(credit).data)


@extend_schema(
    request=StoreEventSerializer,
    responses={200: PurchaseRecordSerializer, 201: PurchaseRecordSerializer},
    description="Record a verified store transaction. Replays return 200 with the existing record.",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsStoreCollaborator])
def store_events(request):
    """Apply one store transaction to the ledger."""
    serializer = StoreEventSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        record, created = get_ledger().handle_store_event(**serializer.validated_data)
    except ProductNotFoundError:
        raise ProductNotFoundAPIError()
    except InvalidCreditAmountError:
        raise InvalidCreditAmountAPIError()

    return Response(
        PurchaseRecordSerializer(record).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


@extend_schema(
    request=RestoreInputSerializer,
    responses={200: RestoreResultSerializer},
    description="Deliver store entitlements that are missing from the ledger.",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsStoreCollaborator])
def restore_purchases(request):
    """Restore purchases reported by the store."""
    serializer = RestoreInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        restored = get_ledger().restore_purchases(serializer.validated_data['events'])
    except ProductNotFoundError:
        raise ProductNotFoundAPIError()

    return Response({'restored_count': restored})


@extend_schema(
    request=None,
    responses={200: PurchaseRecordSerializer},
    parameters=[OpenApiParameter('transaction_id', str, OpenApiParameter.PATH)],
    description="Mark a recorded purchase as restored. Repeated calls keep the first date.",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsStoreCollaborator])
def mark_restored(request, transaction_id):
    """Stamp a purchase record as restored."""
    try:
        record = get_ledger().mark_restored(transaction_id)
    except PurchaseRecordNotFoundError:
        raise PurchaseNotFoundError()

    return Response(PurchaseRecordSerializer(record).data)
