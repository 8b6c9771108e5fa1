"""
Permissions Configuration

Defines all registry permissions as dotted strings ('<resource>.<action>').
Roles store lists of these strings; views declare which ones they require.
"""

PERMISSIONS = {
    # Users
    'USERS_CREATE': 'users.create',
    'USERS_READ': 'users.read',
    'USERS_UPDATE': 'users.update',
    'USERS_DELETE': 'users.delete',
    # Agents
    'AGENTS_CREATE': 'agents.create',
    'AGENTS_READ': 'agents.read',
    'AGENTS_UPDATE': 'agents.update',
    'AGENTS_DELETE': 'agents.delete',
    # Farmers
    'FARMERS_CREATE': 'farmers.create',
    'FARMERS_READ': 'farmers.read',
    'FARMERS_UPDATE': 'farmers.update',
    'FARMERS_DELETE': 'farmers.delete',
    'FARMERS_EXPORT': 'farmers.export',
    # Farms
    'FARMS_CREATE': 'farms.create',
    'FARMS_READ': 'farms.read',
    'FARMS_UPDATE': 'farms.update',
    'FARMS_DELETE': 'farms.delete',
    'FARMS_EXPORT': 'farms.export',
    # Clusters
    'CLUSTERS_CREATE': 'clusters.create',
    'CLUSTERS_READ': 'clusters.read',
    'CLUSTERS_UPDATE': 'clusters.update',
    'CLUSTERS_DELETE': 'clusters.delete',
    # Certificates
    'CERTIFICATES_CREATE': 'certificates.create',
    'CERTIFICATES_READ': 'certificates.read',
    # Roles
    'ROLES_CREATE': 'roles.create',
    'ROLES_READ': 'roles.read',
    'ROLES_UPDATE': 'roles.update',
    'ROLES_DELETE': 'roles.delete',
    # Analytics
    'ANALYTICS_READ': 'analytics.read',
    'DASHBOARD_ACCESS': 'dashboard.access',
    # GIS
    'GIS_VIEW': 'gis.view',
    'GIS_EXPORT': 'gis.export',
    # Settings
    'SETTINGS_READ': 'settings.read',
    'SETTINGS_UPDATE': 'settings.update',
}

ALL_PERMISSIONS = list(PERMISSIONS.values())

# Default permission sets used when seeding system roles
DEFAULT_ROLE_PERMISSIONS = {
    'Administrator': ALL_PERMISSIONS,
    'Supervisor': [
        PERMISSIONS['DASHBOARD_ACCESS'],
        PERMISSIONS['ANALYTICS_READ'],
        PERMISSIONS['FARMERS_READ'],
        PERMISSIONS['FARMERS_UPDATE'],
        PERMISSIONS['FARMS_READ'],
        PERMISSIONS['FARMS_UPDATE'],
        PERMISSIONS['AGENTS_READ'],
        PERMISSIONS['CLUSTERS_READ'],
        PERMISSIONS['CERTIFICATES_READ'],
        PERMISSIONS['CERTIFICATES_CREATE'],
        PERMISSIONS['GIS_VIEW'],
    ],
    'Field Agent': [
        PERMISSIONS['DASHBOARD_ACCESS'],
        PERMISSIONS['FARMERS_CREATE'],
        PERMISSIONS['FARMERS_READ'],
        PERMISSIONS['FARMERS_UPDATE'],
        PERMISSIONS['FARMS_CREATE'],
        PERMISSIONS['FARMS_READ'],
        PERMISSIONS['FARMS_UPDATE'],
        PERMISSIONS['CLUSTERS_READ'],
    ],
    'Viewer': [
        PERMISSIONS['DASHBOARD_ACCESS'],
        PERMISSIONS['ANALYTICS_READ'],
        PERMISSIONS['GIS_VIEW'],
    ],
}


def is_known_permission(codename):
    return codename in ALL_PERMISSIONS
