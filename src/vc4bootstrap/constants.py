"""Fixed paths, package lists and service identifiers for VC4Bootstrap."""

SCRIPT_MODE = 0o755

LOG_FILE = "/var/log/vc4_wrapper.log"
REPORT_FILE = "/var/log/vc4_wrapper-report.json"
DEFAULT_CONFIG_FILE = ".vc4bootstrap.yml"

RELEASE_FILE = "/etc/redhat-release"

# family name as it appears in the release file -> minimum supported 8.x release
SUPPORTED_OS_FAMILIES = {
    "Red Hat Enterprise Linux": "8.2",
    "AlmaLinux": "8.3",
    "Rocky Linux": "8.4",
}
SUPPORTED_MAJOR_VERSIONS = (8, 9)

OS_PACKAGES = (
    "unzip",
    "tar",
    "net-tools",
    "iproute",
    "firewalld",
    "iptables",
    "policycoreutils",
    "policycoreutils-python-utils",
    "selinux-policy",
    "selinux-policy-targeted",
    "net-snmp",
    "net-snmp-utils",
    "curl",
)
CONFLICTING_PACKAGES = ("perl-libs.i686",)

RUNTIME_EXECUTABLE = "python3.9"
RUNTIME_MODULE_RESET = "python36"
RUNTIME_MODULE_ENABLE = "python39"
RUNTIME_PACKAGES = ("python39", "python39-pip", "python39-devel")

VENV_DIR = "/opt/vc4-wrapper/venv"
VENV_BOOTSTRAP_PACKAGES = ("pip", "setuptools", "wheel")
PINNED_LIBRARIES = (
    "alembic==1.13.1",
    "aniso8601==9.0.1",
    "certifi==2024.6.2",
    "click==8.1.7",
    "eventlet==0.36.1",
    "Flask==2.3.3",
    "Flask-JWT==0.3.2",
    "Flask-JWT-Extended==2.4.1",
    "Flask-RESTful==0.3.10",
    "Flask-SocketIO==5.3.6",
    "greenlet==3.0.3",
    "grpcio==1.64.1",
    "grpcio-tools==1.64.1",
    "macholib==1.16.3",
    "pefile==2023.2.7",
    "pyasn1==0.6.0",
    "PyJWT==1.4.2",
    "pyparsing==3.1.2",
    "packaging==24.1",
    "pysmb==1.2.9.1",
    "python-dateutil==2.9.0.post0",
    "python-editor==1.0.4",
    "python-socketio==5.11.3",
    "flask-sqlalchemy==3.1.1",
    "SQLAlchemy==2.0.31",
    "SQLAlchemy-Utils==0.41.2",
    "urllib3==1.26.19",
    "virtualenv==20.26.3",
    "Werkzeug==3.0.3",
    "redis==5.0.6",
    "pymysql==1.1.1",
)

ARCHIVE_EXTENSIONS = (".zip", ".tar.gz", ".tgz", ".tar")
EXTRACT_DIR_NAME = "vc4-package"
INSTALLER_NAME = "installVC4.sh"
SAFE_DIR = "/opt/vc4-install-tmp"

SYSCTL_FILE = "/etc/sysctl.conf"
SYSCTL_SETTINGS = (
    ("net.ipv4.tcp_keepalive_intvl", "30"),
    ("net.ipv4.tcp_keepalive_time", "30"),
    ("net.ipv4.tcp_retries2", "8"),
)

SNMP_CONF = "/etc/snmp/snmpd.conf"
SNMP_MASTER_DIRECTIVE = "master agentx"
SNMP_SOCKET_DIRECTIVE = "agentXSocket tcp:localhost:705"
SNMP_SERVICE = "snmpd.service"

LICENSE_FILE = "/opt/crestron/virtualcontrol/licenses/cert.0.pem"
CERTIFICATE_MARKER = "BEGIN CERTIFICATE"
LICENSE_STATUS_URL = "http://localhost:3030/api/license/status"
VC4_SERVICE = "virtualcontrol.service"
LICENSE_ATTEMPTS = 12
LICENSE_INTERVAL_SECONDS = 10.0
PASTE_KEYWORD = "paste"

SERVICE_PROCESS_PATTERNS = ("node", "VirtualControl", "webApp")
CONSOLE_PATH = "/VirtualControl/config/settings/"
EXCLUDED_NETWORKS = ("127.0.0.0/8", "192.168.122.0/24")
FALLBACK_HOST = "localhost"
READINESS_ATTEMPTS = 30
READINESS_INTERVAL_SECONDS = 10.0
HTTP_TIMEOUT_SECONDS = 5.0
