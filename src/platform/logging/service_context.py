"""
Service context extraction for client-side logging.

Identifies which client instance emitted a record, so logs from many
concurrent booking clients hitting the same seat inventory can be told apart.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'flight-booking-client')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hosts expose their id via HOSTNAME; fall back to the PID locally
    instance_id = os.getenv('HOSTNAME', '')[:8] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance_id}'
