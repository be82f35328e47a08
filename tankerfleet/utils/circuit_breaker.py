"""
Circuit Breaker Utility Module

Stops calling an external service for a cool-down period after repeated
failures, so a dead collaborator does not slow every request down.
"""

import functools
import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

CIRCUIT_BREAKER_ENABLED = True
CIRCUIT_BREAKER_FAILURE_THRESHOLD = 5
CIRCUIT_BREAKER_TIMEOUT = 60

circuit_breaker_states = {}
_states_lock = threading.Lock()


class CircuitBreakerException(Exception):
    """Raised when circuit breaker prevents a call."""
    pass


def _state_for(service_name):
    with _states_lock:
        return circuit_breaker_states.setdefault(service_name, {
            'failures': 0,
            'last_failure_time': None,
            'open': False,
            'half_open': False,
        })


def circuit_breaker(service_name: str, exception_types: tuple = (Exception,), fallback=None):
    """
    Decorator for applying circuit breaker pattern to functions.

    Args:
        service_name: Name of the service for tracking
        exception_types: Tuple of exception types that count as failures
        fallback: Optional callable used instead of raising while the circuit is open

    Usage:
        @circuit_breaker('insights_api', exception_types=(requests.RequestException,))
        def call_insights(payload):
            return requests.post(url, json=payload, timeout=10).json()
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not CIRCUIT_BREAKER_ENABLED:
                return func(*args, **kwargs)

            cb_state = _state_for(service_name)

            if cb_state['open']:
                if time.time() - cb_state['last_failure_time'] > CIRCUIT_BREAKER_TIMEOUT:
                    logger.info(f"Circuit breaker for {service_name} in half-open state, testing...")
                    cb_state['half_open'] = True
                    cb_state['open'] = False
                else:
                    logger.warning(f"Circuit breaker for {service_name} is OPEN - service temporarily unavailable")
                    if fallback is not None:
                        return fallback()
                    raise CircuitBreakerException(f"Circuit breaker is OPEN for {service_name}")

            try:
                result = func(*args, **kwargs)
            except exception_types as e:
                cb_state['failures'] += 1
                cb_state['last_failure_time'] = time.time()
                if cb_state['failures'] >= CIRCUIT_BREAKER_FAILURE_THRESHOLD or cb_state['half_open']:
                    cb_state['open'] = True
                    cb_state['half_open'] = False
                    logger.error(f"Circuit breaker OPENED for {service_name} after {cb_state['failures']} failures: {e}")
                elif cb_state['failures'] >= CIRCUIT_BREAKER_FAILURE_THRESHOLD // 2:
                    logger.warning(f"Circuit breaker WARNING for {service_name}: {cb_state['failures']} failures detected")
                raise

            cb_state['failures'] = 0
            cb_state['half_open'] = False
            return result

        return wrapper
    return decorator


def get_circuit_breaker_status(service_name: str) -> dict:
    """Current state of one circuit breaker."""
    cb_state = circuit_breaker_states.get(service_name)
    if cb_state is None:
        return {'service': service_name, 'status': 'not_initialized', 'failures': 0}
    if cb_state['open']:
        status = 'open'
    elif cb_state['half_open']:
        status = 'half_open'
    else:
        status = 'closed'
    return {'service': service_name, 'status': status, 'failures': cb_state['failures']}


def reset_circuit_breaker(service_name: str) -> None:
    with _states_lock:
        circuit_breaker_states.pop(service_name, None)
