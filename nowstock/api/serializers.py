from rest_framework import serializers

from nowstock.models import MAX_QUANTITY, AdjustDirection, Movement, MovementKind


class ManualMovementSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=MovementKind.choices)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True)
    justification = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True,
    )
    rfid_tag = serializers.CharField(max_length=64, required=False, allow_blank=True)
    product_id = serializers.IntegerField(required=False, allow_null=True)
    direction = serializers.ChoiceField(
        choices=AdjustDirection.choices, required=False, allow_null=True,
    )


class ScanSerializer(serializers.Serializer):
    rfid_tag = serializers.CharField(max_length=64)


class MovementHistorySerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(read_only=True)
    actor_name = serializers.CharField(read_only=True)

    class Meta:
        model = Movement
        fields = [
            "id",
            "product_id",
            "product_name",
            "actor_id",
            "actor_name",
            "kind",
            "quantity",
            "delta",
            "balance_after",
            "unit",
            "justification",
            "source",
            "rfid_tag",
            "created_at",
        ]


class StockLevelSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    name = serializers.CharField()
    rfid_tag = serializers.CharField(allow_null=True)
    minimum_quantity = serializers.IntegerField()
    quantity = serializers.IntegerField()
    below_minimum = serializers.BooleanField()
