from phonenumber_field.serializerfields import PhoneNumberField
from rest_framework import serializers

from farms.serializers import FarmSerializer
from .models import Certificate, Cluster, Farmer, nin_validator


class ClusterSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Cluster
        fields = ('id', 'title', 'cluster_lead_name')


class FarmerSerializer(serializers.ModelSerializer):
    """
    Farmer list/update representation.

    ``status`` is writable so staff can set the manual Validated / Verified
    statuses; Enrolled and FarmCaptured are maintained from the farm count.
    """
    phone = PhoneNumberField(region='NG')
    full_name = serializers.CharField(read_only=True)
    agent_name = serializers.SerializerMethodField()
    cluster_id = serializers.PrimaryKeyRelatedField(
        source='cluster', queryset=Cluster.objects.all(), required=False, allow_null=True
    )
    cluster_title = serializers.CharField(source='cluster.title', read_only=True, default=None)
    farms_count = serializers.SerializerMethodField()
    total_farm_size = serializers.SerializerMethodField()

    class Meta:
        model = Farmer
        fields = (
            'id', 'nin', 'first_name', 'middle_name', 'last_name', 'full_name',
            'date_of_birth', 'gender', 'marital_status', 'employment_status', 'photo_url',
            'phone', 'email', 'whatsapp_number', 'address',
            'state', 'lga', 'ward', 'polling_unit', 'latitude', 'longitude',
            'bank_name', 'account_name', 'account_number', 'bvn',
            'status', 'agent_name', 'cluster_id', 'cluster_title',
            'farms_count', 'total_farm_size', 'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'full_name', 'agent_name', 'created_at', 'updated_at')
        # Duplicate NINs are reported by the views as conflicts (409)
        extra_kwargs = {'nin': {'validators': [nin_validator]}}

    def get_agent_name(self, obj):
        if obj.agent is None:
            return None
        return obj.agent.get_full_name() or obj.agent.username

    def get_farms_count(self, obj):
        return len(obj.farms.all())

    def get_total_farm_size(self, obj):
        return round(sum(farm.farm_size or 0 for farm in obj.farms.all()), 2)


class FarmerDetailSerializer(FarmerSerializer):
    """Farmer with farms, cluster and certificates."""
    farms = FarmSerializer(many=True, read_only=True)
    cluster = ClusterSummarySerializer(read_only=True)
    certificates = serializers.SerializerMethodField()

    class Meta(FarmerSerializer.Meta):
        fields = FarmerSerializer.Meta.fields + ('farms', 'cluster', 'certificates')

    def get_certificates(self, obj):
        return CertificateSerializer(obj.certificates.all(), many=True).data


class ClusterSerializer(serializers.ModelSerializer):
    farmers_count = serializers.IntegerField(read_only=True, default=0)
    cluster_lead_name = serializers.CharField(read_only=True)

    class Meta:
        model = Cluster
        fields = (
            'id', 'title', 'description',
            'cluster_lead_first_name', 'cluster_lead_last_name', 'cluster_lead_name',
            'cluster_lead_email', 'cluster_lead_phone', 'cluster_lead_nin',
            'cluster_lead_state', 'cluster_lead_lga', 'cluster_lead_position',
            'is_active', 'farmers_count', 'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'farmers_count', 'cluster_lead_name', 'created_at', 'updated_at')
        # Title uniqueness is checked case-insensitively by the views (409)
        extra_kwargs = {'title': {'validators': []}}

    def validate_cluster_lead_nin(self, value):
        if value and not (value.isdigit() and len(value) == 11):
            raise serializers.ValidationError("NIN must be exactly 11 digits.")
        return value


class CertificateSerializer(serializers.ModelSerializer):
    farmer_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Certificate
        fields = ('id', 'certificate_id', 'farmer_id', 'issued_date', 'status', 'qr_code')
        read_only_fields = fields


class CertificateFarmerSerializer(serializers.ModelSerializer):
    """Farmer row on the certificates page: latest certificate plus farm summary."""
    phone = serializers.CharField(read_only=True)
    latest_certificate = serializers.SerializerMethodField()
    farms = serializers.SerializerMethodField()

    class Meta:
        model = Farmer
        fields = (
            'id', 'nin', 'first_name', 'middle_name', 'last_name', 'phone',
            'state', 'lga', 'status', 'latest_certificate', 'farms', 'created_at',
        )

    def get_latest_certificate(self, obj):
        certificates = list(obj.certificates.all())
        if not certificates:
            return None
        latest = max(certificates, key=lambda certificate: certificate.issued_date)
        return CertificateSerializer(latest).data

    def get_farms(self, obj):
        return [{'farm_size': farm.farm_size, 'primary_crop': farm.primary_crop} for farm in obj.farms.all()]


class CertificateGenerateSerializer(serializers.Serializer):
    farmer_id = serializers.UUIDField()


class NINLookupSerializer(serializers.Serializer):
    nin = serializers.CharField()
