from .loan_product_schema import LoanProductCreate, LoanProductUpdate, LoanProductAdminUpdate
from .user_schemas import UserRegister, RoleUpdate, RoleResponse
from .loan_application_schema import LoanApplicationSubmit, StatusUpdate
