from .base import Base
from .models.user import User  # Registers users table
from .models.enquiry import Enquiry  # Registers enquiries table
