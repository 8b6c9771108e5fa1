"""
Field Agent Views

Staff endpoints for managing agents (list, create, update, delete, analytics,
spreadsheet export) and the public application endpoint.
"""

import logging
from io import BytesIO

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authorization import HasRegistryPermission
from accounts.permissions_config import PERMISSIONS
from core.pagination import RegistryPagination
from core.sms_service import format_nigerian_phone_number, is_valid_nigerian_phone_number
from .models import Agent
from .notifications import notify_status_change
from .serializers import AgentApplicationSerializer, AgentCreateSerializer, AgentSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


def _user_phone(phone):
    """Normalized phone for the user account, or None when it is not a valid NG number."""
    formatted = format_nigerian_phone_number(phone)
    return formatted if is_valid_nigerian_phone_number(formatted) else None


def _duplicate_contact(email, phone, exclude_agent=None):
    """Return an error message when email or phone already belongs to someone else."""
    users = User.objects.all()
    agents = Agent.objects.all()
    if exclude_agent is not None:
        users = users.exclude(pk=exclude_agent.user_id)
        agents = agents.exclude(pk=exclude_agent.pk)

    if email and (users.filter(email__iexact=email).exists() or agents.filter(email__iexact=email).exists()):
        return 'A user with this email already exists'

    if phone:
        user_phone = _user_phone(phone)
        if agents.filter(phone=phone).exists() or (user_phone and users.filter(phone=user_phone).exists()):
            return 'A user with this phone number already exists'
    return None


class AgentListView(APIView):
    """
    GET: paginated agent list
    POST: create a login account and agent profile
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['AGENTS_READ']],
        'POST': [PERMISSIONS['AGENTS_CREATE']],
    }

    def get(self, request):
        queryset = (
            Agent.objects.select_related('user')
            .annotate(registrations_count=Count('user__registered_farmers'))
        )

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(email__icontains=search)
                | Q(phone__icontains=search)
            )

        status_filter = request.query_params.get('status', '').strip()
        if status_filter and status_filter != 'all':
            queryset = queryset.filter(status=status_filter)

        state = request.query_params.get('state', '').strip()
        if state:
            queryset = queryset.filter(
                Q(state__icontains=state) | Q(assigned_state__icontains=state)
            )

        paginator = RegistryPagination()
        page = paginator.paginate_queryset(queryset.order_by('-created_at'), request, view=self)
        data = AgentSerializer(page, many=True).data
        return Response(paginator.get_paginated_response_data(data, 'agents'))

    def post(self, request):
        serializer = AgentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid agent data', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        data = dict(serializer.validated_data)
        password = data.pop('password', None)
        data.pop('status', None)

        conflict = _duplicate_contact(data['email'], data['phone'])
        if conflict:
            return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)

        if data.get('nin') and Agent.objects.filter(nin=data['nin']).exists():
            return Response(
                {'error': 'An agent with this NIN already exists'},
                status=status.HTTP_409_CONFLICT
            )

        with transaction.atomic():
            user = User(
                username=data['email'].lower(),
                email=data['email'].lower(),
                first_name=data['first_name'],
                last_name=data['last_name'],
                phone=_user_phone(data['phone']),
                role=User.UserRole.AGENT,
            )
            if password:
                user.set_password(password)
            else:
                user.set_unusable_password()
            user.save()

            agent = Agent.objects.create(
                user=user,
                status=Agent.Status.ACTIVE,
                created_by=request.user,
                **data
            )

        logger.info(f"Agent {agent.id} created by {request.user.email}")
        return Response(AgentSerializer(agent).data, status=status.HTTP_201_CREATED)


class AgentDetailView(APIView):
    """
    GET / PATCH / DELETE a single agent.

    A status change queues the matching notification email. Agents who have
    registered farmers cannot be deleted.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['AGENTS_READ']],
        'PATCH': [PERMISSIONS['AGENTS_UPDATE']],
        'DELETE': [PERMISSIONS['AGENTS_DELETE']],
    }

    def get(self, request, agent_id):
        agent = get_object_or_404(Agent.objects.select_related('user'), pk=agent_id)
        return Response(AgentSerializer(agent).data)

    def patch(self, request, agent_id):
        agent = get_object_or_404(Agent.objects.select_related('user'), pk=agent_id)
        previous_status = agent.status

        serializer = AgentSerializer(agent, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid agent data', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        conflict = _duplicate_contact(
            serializer.validated_data.get('email'),
            serializer.validated_data.get('phone'),
            exclude_agent=agent,
        )
        if conflict:
            return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)

        with transaction.atomic():
            agent = serializer.save()
            user = agent.user
            user.first_name = agent.first_name
            user.last_name = agent.last_name
            user.email = agent.email
            user.is_active = agent.status not in (Agent.Status.INACTIVE, Agent.Status.REJECTED)
            user.save(update_fields=['first_name', 'last_name', 'email', 'is_active', 'updated_at'])

        email_queued = False
        if agent.status != previous_status:
            logger.info(f"Agent {agent.id} status changed {previous_status} -> {agent.status}")
            email_queued = notify_status_change(agent, agent.status)

        data = AgentSerializer(agent).data
        data['email_queued'] = email_queued
        return Response(data)

    def delete(self, request, agent_id):
        agent = get_object_or_404(Agent, pk=agent_id)
        registrations = agent.user.registered_farmers.count()
        if registrations:
            return Response(
                {'error': f'Cannot delete agent with {registrations} registered farmers'},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = agent.user
        with transaction.atomic():
            agent.delete()
            user.delete()

        logger.info(f"Agent {agent_id} deleted by {request.user.email}")
        return Response({'message': 'Agent deleted successfully'})


class AgentAnalyticsView(APIView):
    """Recruitment pipeline counts."""
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['AGENTS_READ'], PERMISSIONS['ANALYTICS_READ']]}

    def get(self, request):
        by_status = dict(Agent.objects.values_list('status').annotate(count=Count('id')))

        state_rows = (
            Agent.objects.exclude(state='')
            .values_list('state').annotate(count=Count('id'))
            .order_by('-count')[:10]
        )

        return Response({
            'totalAgents': sum(by_status.values()),
            'activeAgents': by_status.get(Agent.Status.ACTIVE, 0) + by_status.get(Agent.Status.ENROLLED, 0),
            'inactiveAgents': by_status.get(Agent.Status.INACTIVE, 0),
            'newApplications': by_status.get(Agent.Status.APPLIED, 0),
            'interviewing': by_status.get(Agent.Status.CALL_FOR_INTERVIEW, 0),
            'agentsByStatus': [{'status': key, 'count': value} for key, value in by_status.items()],
            'agentsByState': [{'state': state, 'count': count} for state, count in state_rows],
        })


EXPORT_COLUMNS = [
    ('ID', lambda a: str(a.id)),
    ('Display Name', lambda a: a.user.get_full_name() or a.full_name),
    ('First Name', lambda a: a.first_name),
    ('Last Name', lambda a: a.last_name),
    ('Email', lambda a: a.email),
    ('Phone Number', lambda a: a.phone),
    ('Status', lambda a: a.status),
    ('Assigned State', lambda a: a.assigned_state),
    ('Assigned LGA', lambda a: a.assigned_lga),
    ('Assigned Wards', lambda a: ', '.join(str(w) for w in a.assigned_wards or [])),
    ('Registrations Count', lambda a: a.registrations_count),
    ('Date Joined', lambda a: a.created_at.strftime('%Y-%m-%d')),
    ('Last Login', lambda a: a.user.last_login.strftime('%Y-%m-%d %H:%M') if a.user.last_login else 'Never'),
    ('State', lambda a: a.state),
    ('LGA', lambda a: a.local_government),
    ('Ward', lambda a: a.ward),
    ('Address', lambda a: a.address),
    ('NIN', lambda a: a.nin or ''),
    ('BVN', lambda a: a.bvn),
    ('Bank Name', lambda a: a.bank_name),
    ('Account Number', lambda a: a.account_number),
    ('Account Name', lambda a: a.account_name),
    ('Gender', lambda a: a.gender),
    ('Date of Birth', lambda a: a.date_of_birth.isoformat() if a.date_of_birth else ''),
    ('Employment Status', lambda a: a.employment_status),
    ('Marital Status', lambda a: a.marital_status),
]


class AgentExportView(APIView):
    """Excel export of every agent."""
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['AGENTS_READ']]}

    def get(self, request):
        agents = (
            Agent.objects.select_related('user')
            .annotate(registrations_count=Count('user__registered_farmers'))
            .order_by('-created_at')
        )

        wb = Workbook()
        ws = wb.active
        ws.title = "Agents"

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")

        for col, (title, _) in enumerate(EXPORT_COLUMNS, 1):
            cell = ws.cell(row=1, column=col, value=title)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal='center')
            ws.column_dimensions[get_column_letter(col)].width = 18

        for row, agent in enumerate(agents, 2):
            for col, (_, getter) in enumerate(EXPORT_COLUMNS, 1):
                ws.cell(row=row, column=col, value=getter(agent))

        buffer = BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        filename = f"agents_report_{timezone.localdate().isoformat()}.xlsx"
        response = HttpResponse(
            buffer.getvalue(),
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response


class AgentApplicationView(APIView):
    """
    Public field agent application.

    Creates an inactive account (no usable password) and an ``Applied`` agent.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = AgentApplicationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Missing required fields', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        data = dict(serializer.validated_data)
        if not data.get('nin'):
            data['nin'] = None

        conflict = _duplicate_contact(data['email'], data['phone'])
        if conflict:
            return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)

        if data['nin'] and Agent.objects.filter(nin=data['nin']).exists():
            return Response(
                {'error': 'An application with this NIN already exists'},
                status=status.HTTP_409_CONFLICT
            )

        with transaction.atomic():
            user = User(
                username=data['email'].lower(),
                email=data['email'].lower(),
                first_name=data['first_name'],
                last_name=data['last_name'],
                phone=_user_phone(data['phone']),
                role=User.UserRole.AGENT,
                is_active=False,
            )
            user.set_unusable_password()
            user.save()

            agent = Agent.objects.create(user=user, status=Agent.Status.APPLIED, **data)

        logger.info(f"New field agent application {agent.id} ({agent.state})")
        return Response(
            {'success': True, 'message': 'Application submitted successfully', 'id': str(agent.id)},
            status=status.HTTP_201_CREATED
        )
