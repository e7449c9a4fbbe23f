# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth).
    current_balance is ledger-managed and never writable through the API.
    """

    parent_code = serializers.CharField(source="parent.code", read_only=True, default=None)

    class Meta:
        model = Account
        fields = (
            "id",
            "code",
            "name",
            "description",
            "account_type",
            "category",
            "normal_balance",
            "parent",
            "parent_code",
            "level",
            "is_group",
            "opening_balance",
            "current_balance",
            "is_system_account",
            "is_tax_account",
            "tax_rate",
            "is_bank_account",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class AccountListSerializer(serializers.ModelSerializer):
    """
    Compact listing: code, name, type, balance (and id for keys).
    """

    class Meta:
        model = Account
        fields = (
            "id",
            "code",
            "name",
            "account_type",
            "normal_balance",
            "level",
            "is_group",
            "current_balance",
            "is_active",
        )
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible). Organization comes from the request.
    """

    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    description = serializers.CharField(required=False, allow_blank=True)
    account_type = serializers.ChoiceField(choices=Account.ACCOUNT_TYPES)
    category = serializers.ChoiceField(choices=Account.CATEGORIES, required=False, allow_blank=True)
    parent = serializers.IntegerField(required=False, allow_null=True)
    opening_balance = serializers.DecimalField(max_digits=18, decimal_places=2, required=False)
    is_tax_account = serializers.BooleanField(required=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    is_bank_account = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)

    def validate_code(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("code is required")
        return value


class AccountUpdateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20, required=False)
    name = serializers.CharField(max_length=150, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    account_type = serializers.ChoiceField(choices=Account.ACCOUNT_TYPES, required=False)
    category = serializers.ChoiceField(choices=Account.CATEGORIES, required=False, allow_blank=True)
    parent = serializers.IntegerField(required=False, allow_null=True)
    is_tax_account = serializers.BooleanField(required=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    is_bank_account = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if "current_balance" in self.initial_data or "opening_balance" in self.initial_data:
            raise serializers.ValidationError(
                {"current_balance": "Balances change only through posted vouchers"}
            )
        return attrs
