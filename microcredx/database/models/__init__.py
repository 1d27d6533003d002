from .loan_product_model import LoanProduct
from .user_model import User, RoleEnum
from .loan_application_model import (
    LoanApplication,
    ApplicationStatusEnum,
    ApplicationFeeStatusEnum,
    APPLICATION_FORM_FIELDS,
)

DOCUMENT_MODELS = [LoanProduct, User, LoanApplication]
