"""
Marketplace serializers.
Request shapes for the listing and category bulk actions.
"""
from rest_framework import serializers
from apps.marketplace.models import Category, Listing


class ListingBulkActionSerializer(serializers.Serializer):
    """Shape of a listing bulk action; business rules are checked by the dispatcher."""
    action = serializers.CharField()
    listing_ids = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    data = serializers.DictField(required=False, default=dict)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class CategoryBulkActionSerializer(serializers.Serializer):
    action = serializers.CharField()
    category_ids = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    data = serializers.DictField(required=False, default=dict)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class BulkActionResultSerializer(serializers.Serializer):
    """Per-item outcome of a bulk action."""
    action = serializers.CharField()
    succeeded = serializers.ListField(child=serializers.CharField())
    succeeded_targets = serializers.ListField(child=serializers.DictField())
    failed = serializers.ListField(child=serializers.DictField())
    skipped = serializers.ListField(child=serializers.DictField())
    summary = serializers.DictField(child=serializers.IntegerField())


class ListingSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source='vendor.name', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = Listing
        fields = [
            'id', 'title', 'vendor_name', 'category_name', 'price', 'status',
            'is_featured', 'is_flagged', 'flag_reason', 'flag_notes', 'flagged_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class CategorySerializer(serializers.ModelSerializer):
    listing_count = serializers.IntegerField(source='listings.count', read_only=True)

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'slug', 'is_available', 'is_flagged', 'flag_reason',
            'flagged_at', 'listing_count', 'created_at'
        ]
        read_only_fields = fields
