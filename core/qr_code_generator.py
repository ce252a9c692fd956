from io import BytesIO

from qr_code.qrcode.maker import make_qr_code_image
from qr_code.qrcode.utils import QRCodeOptions


def generate_qr_code(data, box_size=10, border=4, fill_color="black", back_color="white"):
    """
    Genera un QR Code PNG dai dati forniti.

    Args:
        data: Stringa da codificare (es. payload JSON di check-in)
        box_size: Dimensione di ogni modulo del QR
        border: Spessore del bordo
        fill_color: Colore del QR
        back_color: Colore dello sfondo

    Returns:
        BytesIO: Buffer contenente l'immagine PNG
    """
    options = QRCodeOptions(
        size=box_size,
        border=border,
        image_format="png",
        dark_color=fill_color,
        light_color=back_color,
    )

    buffer = BytesIO(make_qr_code_image(data, options))
    buffer.seek(0)
    return buffer
