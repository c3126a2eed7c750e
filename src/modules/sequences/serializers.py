from rest_framework import serializers

from modules.sequences.models import Counter


class CounterSerializer(serializers.ModelSerializer):
    class Meta:
        model = Counter
        fields = ["id", "prefix", "number", "postfix", "created_at", "updated_at"]
        read_only_fields = fields
