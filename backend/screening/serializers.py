from django.conf import settings
from rest_framework import serializers

from screening.risk_engine.types import Subject, VatValidationRequest
from screening.vat.formats import normalize_jurisdiction


def _batch_limit() -> int:
    return max(int(getattr(settings, 'SCREENING_BATCH_MAX_ITEMS', 100)), 1)


class SubjectSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=512, required=False, allow_blank=True, default='')
    country = serializers.CharField(max_length=3, required=False, allow_blank=True, default='')
    tax_identifiers = serializers.ListField(
        child=serializers.CharField(max_length=32),
        required=False,
        default=list,
        max_length=20,
    )
    business_description = serializers.CharField(max_length=2000, required=False, allow_blank=True, allow_null=True)
    reference = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)

    def validate_name(self, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise serializers.ValidationError('A partner name is required.')
        return cleaned

    def validate_country(self, value: str) -> str:
        return value.strip().upper()

    def to_subject(self) -> Subject:
        return subject_from_data(self.validated_data)


def subject_from_data(data) -> Subject:
    return Subject(
        name=data['name'],
        address=data.get('address') or '',
        country=data.get('country') or '',
        tax_identifiers=tuple(data.get('tax_identifiers') or ()),
        business_description=data.get('business_description') or None,
        reference=data.get('reference') or None,
    )


class ScreeningBatchSerializer(serializers.Serializer):
    partners = SubjectSerializer(many=True, allow_empty=False)

    def validate_partners(self, value):
        if len(value) > _batch_limit():
            raise serializers.ValidationError(f'At most {_batch_limit()} partners can be screened per batch.')
        return value

    def to_subjects(self) -> list[Subject]:
        return [subject_from_data(item) for item in self.validated_data['partners']]


class VatValidationSerializer(serializers.Serializer):
    jurisdiction = serializers.CharField(max_length=4)
    vat_number = serializers.CharField(max_length=32)

    def validate_jurisdiction(self, value: str) -> str:
        return normalize_jurisdiction(value)

    def to_request(self) -> VatValidationRequest:
        return VatValidationRequest(
            jurisdiction=self.validated_data['jurisdiction'],
            raw_identifier=self.validated_data['vat_number'],
        )


class VatBatchSerializer(serializers.Serializer):
    vat_ids = VatValidationSerializer(many=True, allow_empty=False)

    def validate_vat_ids(self, value):
        if len(value) > _batch_limit():
            raise serializers.ValidationError(f'At most {_batch_limit()} VAT IDs can be validated per batch.')
        return value

    def to_requests(self) -> list[VatValidationRequest]:
        return [
            VatValidationRequest(jurisdiction=item['jurisdiction'], raw_identifier=item['vat_number'])
            for item in self.validated_data['vat_ids']
        ]
