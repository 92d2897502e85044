from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from apps.purchases.exceptions import InsufficientCreditsAPIError, InsufficientCreditsError
from .serializers import (
    GeneratedReportSerializer,
    ReportFilterSerializer,
    ReportRequestSerializer,
)
from .services import ReportGenerationService
from .exceptions import ReportGenerationAPIError, ReportGenerationError


@extend_schema(
    methods=['GET'],
    parameters=[ReportFilterSerializer],
    responses={200: GeneratedReportSerializer(many=True)},
    description="List reports generated for a profile, newest first.",
    tags=['reports'],
)
@extend_schema(
    methods=['POST'],
    request=ReportRequestSerializer,
    responses={201: GeneratedReportSerializer},
    description="Spend one credit and generate a report. Returns 402 when no credit is available.",
    tags=['reports'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def reports(request):
    """
    GET  /api/reports/?profile=<uuid>
    POST /api/reports/  {"profile_id": "<uuid>", "report_area": "career"}
    """
    if request.method == 'GET':
        filter_serializer = ReportFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        service = ReportGenerationService()
        items = service.reports_for_profile(filter_serializer.validated_data['profile'])
        return Response(GeneratedReportSerializer(items, many=True).data)

    serializer = ReportRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    service = ReportGenerationService()
    try:
        report = service.generate_report(
            serializer.validated_data['profile_id'],
            serializer.validated_data['report_area'],
        )
    except InsufficientCreditsError:
        raise InsufficientCreditsAPIError()
    except ReportGenerationError:
        raise ReportGenerationAPIError()

    return Response(
        GeneratedReportSerializer(report).data,
        status=status.HTTP_201_CREATED
    )
