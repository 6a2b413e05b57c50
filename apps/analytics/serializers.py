from rest_framework import serializers


class TrendsQuerySerializer(serializers.Serializer):
    """
    Query parameters of the repayment trends endpoint
    """
    months = serializers.IntegerField(required=False, default=6, min_value=1, max_value=24)
