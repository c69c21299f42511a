from rest_framework import serializers

from kwentamo.catalog.serializers import IngredientSerializer, RecipeSerializer
from kwentamo.core.models import User
from kwentamo.core.serializers import AuditLogUserSerializer
from kwentamo.expenses.serializers import ExpenseSerializer
from kwentamo.purchasing.serializers import PurchaseSerializer, InventoryTransactionSerializer
from kwentamo.sales.serializers import SaleSerializer


class AdminUserSerializer(serializers.ModelSerializer):
    """User row for the admin user list; counts come from queryset annotations"""
    business_name = serializers.SerializerMethodField()
    recipes_count = serializers.IntegerField(read_only=True, default=0)
    sales_count = serializers.IntegerField(read_only=True, default=0)
    expenses_count = serializers.IntegerField(read_only=True, default=0)
    ingredients_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'name', 'phone', 'is_active', 'is_staff', 'is_superuser',
                  'business_name', 'recipes_count', 'sales_count', 'expenses_count', 'ingredients_count',
                  'date_joined', 'last_login', 'created_at']
        read_only_fields = fields

    def get_business_name(self, obj):
        business = getattr(obj, 'business', None)
        return business.business_name if business else None


class OwnedRecordMixin(serializers.Serializer):
    """Adds the owning user to a record serializer"""
    owner = AuditLogUserSerializer(source='user', read_only=True)


class AdminIngredientSerializer(OwnedRecordMixin, IngredientSerializer):
    class Meta(IngredientSerializer.Meta):
        fields = IngredientSerializer.Meta.fields + ['owner']


class AdminRecipeSerializer(OwnedRecordMixin, RecipeSerializer):
    quantity_sold = serializers.IntegerField(read_only=True, default=0)

    class Meta(RecipeSerializer.Meta):
        fields = RecipeSerializer.Meta.fields + ['owner', 'quantity_sold']


class AdminSaleSerializer(OwnedRecordMixin, SaleSerializer):
    class Meta(SaleSerializer.Meta):
        fields = SaleSerializer.Meta.fields + ['owner']


class AdminExpenseSerializer(OwnedRecordMixin, ExpenseSerializer):
    class Meta(ExpenseSerializer.Meta):
        fields = ExpenseSerializer.Meta.fields + ['owner']


class AdminPurchaseSerializer(OwnedRecordMixin, PurchaseSerializer):
    class Meta(PurchaseSerializer.Meta):
        fields = PurchaseSerializer.Meta.fields + ['owner']


class AdminInventoryTransactionSerializer(OwnedRecordMixin, InventoryTransactionSerializer):
    class Meta(InventoryTransactionSerializer.Meta):
        fields = InventoryTransactionSerializer.Meta.fields + ['owner']
