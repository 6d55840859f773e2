import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from screening.serializers import (
    ScreeningBatchSerializer,
    SubjectSerializer,
    VatBatchSerializer,
    VatValidationSerializer,
)
from screening.services import (
    check_registry_service_status,
    check_screening_service_status,
    get_screening_configuration,
    screen_subject,
    screen_subjects,
    serialize_batch_summary,
    serialize_screening_result,
    serialize_vat_result,
    validate_vat_id,
    validate_vat_ids,
)
from screening.vat.formats import supported_jurisdictions

logger = logging.getLogger(__name__)


class HealthAPIView(APIView):
    throttle_scope = 'default'
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        screening_status = check_screening_service_status()
        registry_status = check_registry_service_status()
        available = screening_status['available'] and registry_status['available']
        return Response(
            {
                'status': 'ok' if available else 'degraded',
                'timestamp': timezone.now(),
                'version': settings.APP_VERSION,
                'screening': screening_status,
                'registry': registry_status,
            },
            status=status.HTTP_200_OK if available else status.HTTP_503_SERVICE_UNAVAILABLE,
        )


class ScreeningAPIView(APIView):
    throttle_scope = 'screening'
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = SubjectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = screen_subject(serializer.to_subject())
        return Response(serialize_screening_result(result), status=status.HTTP_200_OK)


class ScreeningBatchAPIView(APIView):
    throttle_scope = 'batch'
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ScreeningBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        subjects = serializer.to_subjects()
        logger.info('Batch screening requested for %s partner(s).', len(subjects))
        summary = screen_subjects(subjects)
        return Response(serialize_batch_summary(summary), status=status.HTTP_200_OK)


class ScreeningConfigurationAPIView(APIView):
    throttle_scope = 'default'
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(get_screening_configuration())


class ScreeningStatusAPIView(APIView):
    throttle_scope = 'default'
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(check_screening_service_status())


class VatValidationAPIView(APIView):
    throttle_scope = 'vat'
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = VatValidationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vat_request = serializer.to_request()
        result = validate_vat_id(vat_request.jurisdiction, vat_request.raw_identifier)
        return Response(serialize_vat_result(result), status=status.HTTP_200_OK)


class VatBatchValidationAPIView(APIView):
    throttle_scope = 'batch'
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = VatBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vat_requests = serializer.to_requests()
        logger.info('Batch VAT validation requested for %s identifier(s).', len(vat_requests))
        summary = validate_vat_ids(vat_requests)
        return Response(serialize_batch_summary(summary), status=status.HTTP_200_OK)


class VatCountriesAPIView(APIView):
    throttle_scope = 'default'
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({'results': supported_jurisdictions()})


class VatStatusAPIView(APIView):
    throttle_scope = 'default'
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(check_registry_service_status())
