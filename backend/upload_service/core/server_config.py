"""
Server Configuration
====================
Uvicorn server configuration for development and production.
"""

from typing import Dict, Any, Optional

from upload_service.core.config import Settings, settings as default_settings


def get_uvicorn_config(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Get Uvicorn server configuration based on environment

    Returns:
        Dict[str, Any]: Uvicorn configuration parameters
    """
    settings = settings or default_settings

    config = {
        "app": "upload_service.main:app",
        "host": settings.API_HOST,
        "port": settings.API_PORT,
        "log_config": None,  # loguru handles logging
    }

    if settings.is_development:
        config.update({
            "reload": True,
            "reload_dirs": ["upload_service"],
            "log_level": "debug" if settings.DEBUG else "info",
            "access_log": True,
            "use_colors": True,
        })
    else:
        config.update({
            "reload": False,
            "workers": settings.API_WORKERS,
            "log_level": "info",
            "access_log": True,
            "use_colors": False,
            "proxy_headers": True,
            "forwarded_allow_ips": "*",
            "limit_concurrency": 1000,
            "backlog": 2048,
            "timeout_keep_alive": 5,
        })

    return config
