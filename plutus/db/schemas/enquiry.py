from plutus.db.schemas.user import CamelModel


class EnquiryRequest(CamelModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""
    product_id: str = ""
    product_name: str = ""
    product_category: str = ""
