from fundind.core.use_cases.process_delivery import DeliveryProcessor, DeliveryResult, ProcessStats

__all__ = ["DeliveryProcessor", "DeliveryResult", "ProcessStats"]
