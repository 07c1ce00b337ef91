"""
Application layer DTOs.
Data Transfer Objects for API requests and responses.
"""

from .base_dto import *
from .user_dto import *
from .job_dto import *
from .contract_dto import *
from .payment_dto import *
from .dispute_dto import *
from .verification_dto import *
from .task_dto import *
