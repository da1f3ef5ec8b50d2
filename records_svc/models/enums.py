"""
Closed value sets shared by models, validation and schemas.

Stored in the database by member name (e.g. "A_PLUS").
"""
from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    NURSE = "NURSE"
    LAB_TECHNICIAN = "LAB_TECHNICIAN"
    PATIENT = "PATIENT"


class Sex(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class BloodGroup(str, Enum):
    A_PLUS = "A_PLUS"
    A_MINUS = "A_MINUS"
    B_PLUS = "B_PLUS"
    B_MINUS = "B_MINUS"
    AB_PLUS = "AB_PLUS"
    AB_MINUS = "AB_MINUS"
    O_PLUS = "O_PLUS"
    O_MINUS = "O_MINUS"
