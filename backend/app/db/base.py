from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.project import Project  # noqa: F401
from backend.app.models.task import Task  # noqa: F401
from backend.app.models.invoice import Invoice  # noqa: F401
from backend.app.models.invoice_item import InvoiceItem  # noqa: F401
from backend.app.models.receivable import Receivable  # noqa: F401
from backend.app.models.revenue_record import RevenueRecord  # noqa: F401
from backend.app.models.tax_payment import TaxPayment  # noqa: F401
