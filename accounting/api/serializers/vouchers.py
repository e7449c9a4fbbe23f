# accounting/api/serializers/vouchers.py

from django.conf import settings
from rest_framework import serializers

from accounting.models.voucher import EntryType, Voucher, VoucherLine


class VoucherLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)

    class Meta:
        model = VoucherLine
        fields = (
            "line_number",
            "account",
            "account_code",
            "account_name",
            "entry_type",
            "amount",
            "debit",
            "credit",
            "description",
        )
        read_only_fields = fields


class VoucherSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth) - clean, stable contract.
    """

    lines = VoucherLineSerializer(many=True, read_only=True)
    created_by = serializers.CharField(source="created_by.username", read_only=True, default=None)
    posted_by = serializers.CharField(source="posted_by.username", read_only=True, default=None)
    voided_by = serializers.CharField(source="voided_by.username", read_only=True, default=None)

    class Meta:
        model = Voucher
        fields = (
            "id",
            "voucher_number",
            "voucher_type",
            "voucher_date",
            "fiscal_year",
            "fiscal_period",
            "narration",
            "reference_type",
            "reference_id",
            "reference_number",
            "total_debit",
            "total_credit",
            "status",
            "lines",
            "created_by",
            "posted_by",
            "posted_at",
            "voided_by",
            "voided_at",
            "void_reason",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class VoucherLineInputSerializer(serializers.Serializer):
    """
    One entry, either column form (debit/credit) or typed form (entry_type/amount).
    Business rules (exactly one side, balance, account state) are enforced by
    the voucher service so the API and internal callers share one rulebook.
    """

    account = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False)
    entry_type = serializers.ChoiceField(choices=EntryType.choices, required=False)
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, required=False)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        if "entry_type" in attrs and "amount" not in attrs:
            raise serializers.ValidationError({"amount": "amount is required with entry_type"})
        return attrs


class VoucherCreateSerializer(serializers.Serializer):
    voucher_type = serializers.ChoiceField(choices=Voucher.VOUCHER_TYPES)
    voucher_date = serializers.DateField(required=False)
    narration = serializers.CharField()
    entries = VoucherLineInputSerializer(many=True)
    reference_type = serializers.ChoiceField(choices=Voucher.REFERENCE_TYPES, required=False)
    reference_id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    reference_number = serializers.CharField(required=False, allow_blank=True, max_length=64)
    auto_post = serializers.BooleanField(required=False, default=False)

    def validate_narration(self, value):
        value = (value or "").strip()
        min_len = getattr(settings, "VOUCHER_NARRATION_MIN_LENGTH", 5)
        if len(value) < min_len:
            raise serializers.ValidationError(f"Narration must be at least {min_len} characters")
        return value


class VoucherUpdateSerializer(serializers.Serializer):
    voucher_date = serializers.DateField(required=False)
    narration = serializers.CharField(required=False)
    entries = VoucherLineInputSerializer(many=True, required=False)
    reference_type = serializers.ChoiceField(choices=Voucher.REFERENCE_TYPES, required=False)
    reference_id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    reference_number = serializers.CharField(required=False, allow_blank=True, max_length=64)


class VoidVoucherSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, max_length=500)
