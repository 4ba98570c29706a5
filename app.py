"""
WSGI entry point for running the downloader behind gunicorn or another WSGI server
"""
import sys
import os

# Add the src directory to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from file_downloader import Config, build_service

service = build_service(Config.get())
service.health_check.start()

application = service.app

if __name__ == '__main__':
    service.start()
    service.wait()
    sys.exit(0 if service.shutdown() else 1)
