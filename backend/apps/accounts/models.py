from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils import timezone
from .managers import UserManager


# ============================
# User Model
# ============================

class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom user model with email-based authentication.
    Admin and support staff review business applications; business owners
    are linked to the vendors and restaurants they applied with.
    """

    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        SUPPORT = "SUPPORT", "Support"
        VENDOR = "VENDOR", "Vendor"
        RESTAURANT_OWNER = "RESTAURANT_OWNER", "Restaurant Owner"
        RESTAURANT_MANAGER = "RESTAURANT_MANAGER", "Restaurant Manager"
        BUYER = "BUYER", "Buyer"

    # Core fields
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=150, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.BUYER, db_index=True)

    # Account status
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Ban system
    is_banned = models.BooleanField(default=False, db_index=True)
    ban_reason = models.TextField(blank=True, null=True)
    banned_at = models.DateTimeField(blank=True, null=True)

    # Timestamps
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def is_reviewer(self):
        """Admin or support staff allowed to act on the approval queue."""
        return self.role in (self.Role.ADMIN, self.Role.SUPPORT) or self.is_staff

    def ban(self, reason=""):
        """Ban this user with a reason."""
        self.is_banned = True
        self.ban_reason = reason
        self.banned_at = timezone.now()
        self.save()

    def unban(self):
        """Unban this user."""
        self.is_banned = False
        self.ban_reason = None
        self.banned_at = None
        self.save()
