"""
Django Server Launcher with Debug Information
Run this script to start the Migration Dashboard API development server
"""
import os
import sys
import socket

# Set the project path
project_path = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_path)

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')


def get_local_ip():
    """Get the local IP address for network access"""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return "127.0.0.1"


def print_startup_info(host: str, port: int):
    """Print the endpoints a frontend developer needs"""
    local_ip = get_local_ip()
    base = f"http://127.0.0.1:{port}"

    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    RESET = '\033[0m'

    print()
    print(f"{BOLD}{GREEN}{'='*60}{RESET}")
    print(f"{BOLD}{GREEN}  Migration Dashboard API - Debug Mode{RESET}")
    print(f"{BOLD}{GREEN}{'='*60}{RESET}")
    print()

    print(f"{BOLD}{CYAN}Server URLs:{RESET}")
    print(f"   Local:      {base}")
    print(f"   Localhost:  http://localhost:{port}")
    if local_ip != "127.0.0.1":
        print(f"   Network:    http://{local_ip}:{port}")
    print()

    print(f"{BOLD}{YELLOW}Authentication:{RESET}")
    print(f"   JWT Login:     POST {base}/api/v1/auth/token/")
    print(f"   JWT Refresh:   POST {base}/api/v1/auth/token/refresh/")
    print(f"   Organization:  send X-Organization-ID to pick the current organization")
    print()

    print(f"{BOLD}{BLUE}API Documentation:{RESET}")
    print(f"   Swagger UI:    {base}/api/docs/")
    print(f"   ReDoc:         {base}/api/redoc/")
    print(f"   OpenAPI JSON:  {base}/api/schema/")
    print()

    print(f"{BOLD}{CYAN}Key API Endpoints:{RESET}")
    print(f"   Health Check:  {base}/api/v1/health/")
    print(f"   Current User:  {base}/api/v1/users/me/")
    print(f"   Organizations: {base}/api/v1/organizations/")
    print(f"   Invitations:   {base}/api/v1/invitations/pending/")
    print(f"   Platforms:     {base}/api/v1/platforms/")
    print(f"   Projects:      {base}/api/v1/projects/")
    print(f"   Wizard:        {base}/api/v1/projects/wizard/")
    print(f"   Custom Files:  {base}/api/v1/projects/<id>/custom-files/")
    print(f"   Previews:      {base}/api/v1/projects/<id>/preview/?type=product&page=1")
    print()

    print(f"{BOLD}{YELLOW}CORS Configuration:{RESET}")
    print(f"   Ensure your frontend URL is in CORS_ALLOWED_ORIGINS")
    print(f"   Check core/settings.py for CORS settings")
    print()

    print(f"{GREEN}{'='*60}{RESET}")
    print()


if __name__ == '__main__':
    port = 8001
    host = '0.0.0.0'  # Listen on all interfaces

    args = sys.argv[1:]
    if len(args) >= 1 and args[0].isdigit():
        port = int(args[0])

    print_startup_info(host, port)

    from django.core.management import execute_from_command_line
    execute_from_command_line(['manage.py', 'runserver', f'{host}:{port}'])
