"""Scheduled task definitions for background jobs.

This module contains the task implementations executed by the JobScheduler.
Each task is an async function that runs independently in the background
and returns a summary dictionary.
"""

import logging
from typing import Any

from learnguard.shared.service_registry import ServiceRegistry, get_service_registry

logger = logging.getLogger(__name__)


async def run_risk_analysis(registry: ServiceRegistry | None = None) -> dict[str, Any]:
    """Run the analysis cycle for every known learner.

    This task:
    1. Lists learners known to the stats provider
    2. Detects risks and generates strategies for each
    3. Creates alerts (and auto-executes strategies when enabled)

    A failure for one learner is logged and recorded; the others still run.

    Args:
        registry: Services to use (defaults to the process-wide registry)

    Returns:
        Summary of the analysis run.
    """
    registry = registry or get_service_registry()
    logger.info("Starting risk analysis task")
    start_time = registry.clock()
    results = {
        'started_at': start_time.isoformat(),
        'users_analyzed': 0,
        'risks_detected': 0,
        'alerts_created': 0,
        'interventions_started': 0,
        'errors': [],
    }

    try:
        user_ids = await registry.provider.list_user_ids()
    except Exception as e:
        error_msg = f"Could not list learners: {e}"
        logger.exception(error_msg)
        user_ids = []
        results['errors'].append(error_msg)

    for user_id in user_ids:
        try:
            summary = await registry.intervention.run_analysis_cycle(user_id)
        except Exception as e:
            error_msg = f"Risk analysis failed for user {user_id}: {e}"
            logger.error(error_msg)
            results['errors'].append(error_msg)
            continue

        results['users_analyzed'] += 1
        results['risks_detected'] += summary['risks']
        results['alerts_created'] += summary['alerts']
        results['interventions_started'] += summary['auto_executed']

    end_time = registry.clock()
    results['completed_at'] = end_time.isoformat()
    results['duration_seconds'] = (end_time - start_time).total_seconds()

    logger.info(
        f"Risk analysis completed: {results['risks_detected']} risks "
        f"for {results['users_analyzed']} users"
    )
    return results


async def run_alert_sweep(registry: ServiceRegistry | None = None) -> dict[str, Any]:
    """Remove expired alerts from the alert history.

    Returns:
        Summary of the sweep.
    """
    registry = registry or get_service_registry()
    logger.info("Starting alert sweep task")
    start_time = registry.clock()
    results = {
        'started_at': start_time.isoformat(),
        'alerts_removed': 0,
        'errors': [],
    }

    try:
        results['alerts_removed'] = await registry.intervention.clear_expired_alerts()
    except Exception as e:
        error_msg = f"Alert sweep failed: {e}"
        logger.exception(error_msg)
        results['errors'].append(error_msg)

    results['completed_at'] = registry.clock().isoformat()
    logger.info(f"Alert sweep completed: {results['alerts_removed']} alerts removed")
    return results
