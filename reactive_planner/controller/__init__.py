from .heading_controller import HeadingController, HeadingControlResult
from .motion_controller import MotionController, VelocityCommand

__all__ = ['HeadingController', 'HeadingControlResult', 'MotionController', 'VelocityCommand']
