"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "mca-pipeline"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_priority_evaluation(request_id: str, deal_count: int, urgent_count: int, high_count: int) -> None:
    """Log a scoring pass over one or more deals"""
    logging.info(
        "Priority evaluated",
        extra={
            "request_id": request_id,
            "step": "priority_evaluation",
            "deal_count": deal_count,
            "urgent_count": urgent_count,
            "high_count": high_count,
        },
    )


def log_offer_calculation(request_id: str, frequency: str, amount: float, total_payback: float) -> None:
    """Log offer calculator inputs and payback"""
    logging.info(
        "Offer calculated",
        extra={
            "request_id": request_id,
            "step": "offer_calculation",
            "payment_frequency": frequency,
            "amount": amount,
            "total_payback": total_payback,
        },
    )


def log_risk_assessment(request_id: str, deal_id: str | None, overall_risk: str, risk_score: int) -> None:
    """Log the advisory risk outcome shown to the underwriter"""
    logging.info(
        "Risk assessed",
        extra={
            "request_id": request_id,
            "deal_id": deal_id,
            "step": "risk_assessment",
            "overall_risk": overall_risk,
            "risk_score": risk_score,
        },
    )


def log_underwriting_decision(request_id: str, deal_id: str | None, status: str, decided_by: str) -> None:
    """Log the underwriter's recorded decision"""
    logging.info(
        "Underwriting decision recorded",
        extra={
            "request_id": request_id,
            "deal_id": deal_id,
            "step": "underwriting_decision",
            "status": status,
            "decided_by": decided_by,
        },
    )


def log_analytics_report(request_id: str, deal_count: int, funded_volume: float, iso_count: int) -> None:
    """Log the size of an analytics report"""
    logging.info(
        "Analytics report built",
        extra={
            "request_id": request_id,
            "step": "analytics_report",
            "deal_count": deal_count,
            "funded_volume": funded_volume,
            "iso_count": iso_count,
        },
    )
