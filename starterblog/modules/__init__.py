"""
Modules package initialization.
This package contains all the functional modules of the application.
"""

from starterblog.modules import auth
from starterblog.modules import user_management
from starterblog.modules import posts
