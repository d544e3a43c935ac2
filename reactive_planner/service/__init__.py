from .data_hub import SharedStateGuard, StateSnapshot, DisplayFields

__all__ = ['SharedStateGuard', 'StateSnapshot', 'DisplayFields']
