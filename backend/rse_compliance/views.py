"""
RSE Compliance API Views.

Provides REST API endpoints for heavy-vehicle compliance validation, rule
lookup, alternative generation and cumulative driver checks. All endpoints
are scoped to the organization named by the X-Organization-Id header and
delegate the business logic to the service layer.
"""

import logging
from datetime import datetime
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from fleet.models import Driver
from fleet.tenancy import OrganizationScopedViewMixin, get_tenant_object
from .serializers import (
    CheckCumulativeSerializer,
    ComplianceAuditLogSerializer,
    ValidateComplianceSerializer,
)
from .services.alternative_generator import AlternativeGeneratorService, AlternativeGenerationError
from .services.compliance_validator import (
    ComplianceValidatorService,
    ComplianceValidationError,
    get_compliance_summary,
)
from .services.rse_counter import (
    RSECounterError,
    RSECounterService,
    business_date,
    derive_decision,
)
from .services.rule_repository import CategoryNotFoundError, RuleRepository, RuleResolutionError

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_LOG_LIMIT = 10
MAX_AUDIT_LOG_LIMIT = 100


def resolve_trip_rules(repository, validation_input):
    """
    Rules for a validation request: the explicit license category when
    given, otherwise the rules of the vehicle category.

    Raises:
        CategoryNotFoundError: when the vehicle or license category is not
            the organization's
    """
    vehicle_category = repository.get_vehicle_category(validation_input.vehicle_category_id)
    if vehicle_category is None:
        raise CategoryNotFoundError(
            f'Vehicle category {validation_input.vehicle_category_id} not found'
        )

    if validation_input.license_category_id:
        ensure_license_category(repository, validation_input.license_category_id)
        return repository.get_rules_for_license_category(validation_input.license_category_id)

    return repository.get_rules_for_regulatory_category(vehicle_category.regulatory_category)


def ensure_license_category(repository, license_category_id):
    if repository.get_license_category(license_category_id) is None:
        raise CategoryNotFoundError(f'License category {license_category_id} not found')


class ComplianceValidationViewSet(OrganizationScopedViewMixin, viewsets.ViewSet):
    """
    ViewSet for single-trip RSE validation.

    Stateless: nothing is persisted by these endpoints.
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'])
    def validate(self, request):
        """
        Validate a trip against the organization's RSE rules.

        Request Body:
            vehicle_category_id (str), regulatory_category (LIGHT|HEAVY),
            license_category_id (str, optional), trip_analysis (object),
            pickup_at (datetime), estimated_dropoff_at (datetime, optional)
        """
        serializer = ValidateComplianceSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(
                serializer.errors,
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            validation_input = serializer.to_validation_input(self.organization.id)
            repository = RuleRepository(self.organization)
            rules = resolve_trip_rules(repository, validation_input)

            result = ComplianceValidatorService().validate(validation_input, rules)

            response_data = result.to_dict()
            response_data['summary'] = get_compliance_summary(result)
            response_data['has_rules'] = rules is not None

            logger.info(
                f"Compliance validation for organization {self.organization.slug}: "
                f"{response_data['summary']['status']}"
            )
            return Response(response_data)

        except CategoryNotFoundError as e:
            return Response(
                {'error': str(e)},
                status=status.HTTP_404_NOT_FOUND
            )

        except (RuleResolutionError, ComplianceValidationError) as e:
            logger.error(f"Compliance validation failed: {str(e)}")
            return Response(
                {'error': 'Compliance validation failed', 'details': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

    @action(detail=False, methods=['post'])
    def alternatives(self, request):
        """
        Generate staffing alternatives for a non-compliant HEAVY trip.

        Request Body: Same as validate endpoint
        """
        serializer = ValidateComplianceSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(
                serializer.errors,
                status=status.HTTP_400_BAD_REQUEST
            )

        if serializer.validated_data['regulatory_category'] != 'HEAVY':
            return Response({
                'has_alternatives': False,
                'alternatives': [],
                'original_violations': [],
                'message': 'Alternatives only available for heavy vehicles',
            })

        try:
            validation_input = serializer.to_validation_input(self.organization.id)
            repository = RuleRepository(self.organization)
            rules = resolve_trip_rules(repository, validation_input)

            compliance_result = ComplianceValidatorService().validate(validation_input, rules)
            cost_parameters = repository.get_cost_parameters()

            result = AlternativeGeneratorService().generate_alternatives(
                compliance_result, cost_parameters, rules
            )
            return Response(result.to_dict())

        except CategoryNotFoundError as e:
            return Response(
                {'error': str(e)},
                status=status.HTTP_404_NOT_FOUND
            )

        except (RuleResolutionError, ComplianceValidationError, AlternativeGenerationError) as e:
            logger.error(f"Alternative generation failed: {str(e)}")
            return Response(
                {'error': 'Alternative generation failed', 'details': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class RSERulesViewSet(OrganizationScopedViewMixin, viewsets.ViewSet):
    """
    ViewSet for reading configured RSE rules.

    Rules are maintained through the admin; these endpoints are read-only.
    """

    permission_classes = [AllowAny]

    def list(self, request):
        """
        List all rules, optionally filtered by vehicle category.

        Query Parameters:
            vehicle_category_id (str): HEAVY keeps capped-speed rules only
        """
        vehicle_category_id = request.query_params.get('vehicle_category_id')
        rules = RuleRepository(self.organization).list_rules(vehicle_category_id)

        if rules is None:
            return Response(
                {'error': f'Vehicle category {vehicle_category_id} not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response({
            'data': [rule.to_dict() for rule in rules],
            'total': len(rules),
        })

    def retrieve(self, request, license_category_id=None):
        """Get the rules of one license category."""
        rules = RuleRepository(self.organization).get_rules_for_license_category(license_category_id)

        if rules is None:
            return Response(
                {'error': f'No RSE rules found for license category {license_category_id}'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(rules.to_dict())

    @action(detail=False, methods=['get'])
    def by_vehicle(self, request, vehicle_category_id=None):
        """Get the applicable rules of a vehicle category."""
        resolved = RuleRepository(self.organization).get_rules_for_vehicle_category(vehicle_category_id)

        if resolved is None:
            return Response(
                {'error': f'Vehicle category {vehicle_category_id} not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        rules = resolved['rules']
        return Response({
            'vehicle_category': resolved['vehicle_category'].to_summary(),
            'rules': rules.to_dict() if rules else None,
            'has_rules': rules is not None,
        })


class CumulativeComplianceViewSet(OrganizationScopedViewMixin, viewsets.ViewSet):
    """
    ViewSet for checking a driver's cumulative daily compliance before a
    mission is assigned.
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'])
    def check(self, request):
        """
        Check whether one more mission keeps the driver compliant.

        Request Body:
            driver_id (uuid), date (date, optional), regulatory_category,
            license_category_id (optional), additional_driving_minutes,
            additional_amplitude_minutes (optional), quote_id / mission_id /
            vehicle_category_id (optional audit context), log_decision (bool),
            reserve (bool)
        """
        serializer = CheckCumulativeSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(
                serializer.errors,
                status=status.HTTP_400_BAD_REQUEST
            )

        data = serializer.validated_data
        driver = get_tenant_object(Driver.objects.all(), self.organization, data['driver_id'])
        if driver is None:
            return Response(
                {'error': f"Driver {data['driver_id']} not found"},
                status=status.HTTP_404_NOT_FOUND
            )

        mission_date = data.get('date') or business_date(timezone.now())
        license_category_id = data.get('license_category_id') or None
        if license_category_id:
            try:
                ensure_license_category(RuleRepository(self.organization), license_category_id)
            except CategoryNotFoundError as e:
                return Response(
                    {'error': str(e)},
                    status=status.HTTP_404_NOT_FOUND
                )
        counter_service = RSECounterService()

        try:
            if data['reserve']:
                result, activity = counter_service.check_and_reserve(
                    self.organization.id,
                    driver.id,
                    mission_date,
                    data['additional_driving_minutes'],
                    data['additional_amplitude_minutes'],
                    data['regulatory_category'],
                    license_category_id,
                    mission_id=data.get('mission_id') or None,
                    quote_id=data.get('quote_id') or None,
                )
            else:
                result = counter_service.check_cumulative_compliance(
                    self.organization.id,
                    driver.id,
                    mission_date,
                    data['additional_driving_minutes'],
                    data['additional_amplitude_minutes'],
                    data['regulatory_category'],
                    license_category_id,
                )
                activity = None

        except (RSECounterError, RuleResolutionError) as e:
            logger.error(f"Cumulative compliance check failed: {str(e)}")
            return Response(
                {'error': 'Cumulative compliance check failed', 'details': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        decision = derive_decision(result)
        response_data = result.to_dict()
        response_data['decision'] = decision.value
        response_data['decision_logged'] = False
        if data['reserve']:
            response_data['reserved'] = activity is not None
            response_data['activity_id'] = str(activity.id) if activity else None

        logger.info(
            f"Cumulative check for driver {driver.id} on {mission_date}: {decision.value}"
        )

        if data['log_decision']:
            try:
                counter_service.log_cumulative_result(
                    self.organization.id,
                    driver.id,
                    result,
                    quote_id=data.get('quote_id') or None,
                    mission_id=data.get('mission_id') or None,
                    vehicle_category_id=data.get('vehicle_category_id') or None,
                )
                response_data['decision_logged'] = True
            except RSECounterError as e:
                logger.error(f"Compliance decision for driver {driver.id} was not logged: {str(e)}")
                response_data['log_error'] = str(e)
                return Response(response_data, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(response_data)


class DriverComplianceViewSet(OrganizationScopedViewMixin, viewsets.ViewSet):
    """
    ViewSet for a driver's compliance state: daily snapshot and audit trail.
    """

    permission_classes = [AllowAny]

    def _get_driver(self, driver_id):
        return get_tenant_object(Driver.objects.all(), self.organization, driver_id)

    @action(detail=True, methods=['get'])
    def snapshot(self, request, driver_id=None):
        """
        Counters, limits and status for LIGHT and HEAVY on one date.

        Query Parameters:
            date (YYYY-MM-DD): Defaults to today's business date
        """
        driver = self._get_driver(driver_id)
        if driver is None:
            return Response(
                {'error': f'Driver {driver_id} not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        raw_date = request.query_params.get('date')
        if raw_date:
            try:
                snapshot_date = datetime.strptime(raw_date, '%Y-%m-%d').date()
            except ValueError:
                return Response(
                    {'error': 'date must use the YYYY-MM-DD format'},
                    status=status.HTTP_400_BAD_REQUEST
                )
        else:
            snapshot_date = business_date(timezone.now())

        snapshot = RSECounterService().get_compliance_snapshot(
            self.organization.id, driver.id, snapshot_date
        )
        snapshot['driver_id'] = str(driver.id)
        return Response(snapshot)

    @action(detail=True, methods=['get'])
    def audit_logs(self, request, driver_id=None):
        """
        Most recent compliance decisions for a driver.

        Query Parameters:
            limit (int): Number of records, default 10, max 100
        """
        driver = self._get_driver(driver_id)
        if driver is None:
            return Response(
                {'error': f'Driver {driver_id} not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        try:
            limit = int(request.query_params.get('limit', DEFAULT_AUDIT_LOG_LIMIT))
        except ValueError:
            return Response(
                {'error': 'limit must be an integer'},
                status=status.HTTP_400_BAD_REQUEST
            )
        limit = max(1, min(limit, MAX_AUDIT_LOG_LIMIT))

        logs = RSECounterService().get_recent_audit_logs(self.organization.id, driver.id, limit)
        serializer = ComplianceAuditLogSerializer(logs, many=True)
        return Response({
            'data': serializer.data,
            'total': len(serializer.data),
        })
