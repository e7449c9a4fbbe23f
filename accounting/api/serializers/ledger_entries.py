# accounting/api/serializers/ledger_entries.py

from rest_framework import serializers

from accounting.models.ledger import LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = LedgerEntry
        fields = (
            "id",
            "voucher",
            "voucher_number",
            "voucher_type",
            "line_number",
            "account",
            "account_code",
            "account_name",
            "entry_type",
            "amount",
            "running_balance",
            "entry_date",
            "fiscal_year",
            "fiscal_period",
            "description",
            "narration",
            "reference_type",
            "reference_id",
            "status",
            "reversal_of",
            "created_at",
            "voided_at",
            "void_reason",
        )
        read_only_fields = fields
