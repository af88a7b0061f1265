"""Shared fixtures for building OneNote page XML."""

import pytest

ONENOTE_NS = 'http://schemas.microsoft.com/office/onenote/2013/onenote'

# 1x1 transparent PNG
PNG_BASE64 = (
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=='
)


def page(content='', title=None, name=None, extra=''):
    """Wrap OE elements in a page with a single outline."""
    name_attr = f' name="{name}"' if name is not None else ''
    title_xml = ''
    if title is not None:
        title_xml = f'<one:Title><one:OE><one:T><![CDATA[{title}]]></one:T></one:OE></one:Title>'
    return (
        f'<?xml version="1.0"?>'
        f'<one:Page xmlns:one="{ONENOTE_NS}"{name_attr}>'
        f'{title_xml}'
        f'<one:Outline><one:OEChildren>{content}</one:OEChildren></one:Outline>'
        f'{extra}'
        f'</one:Page>'
    )


def oe(text=None, style=None, bullet=False, number=False, children='', extra=''):
    """Build one OE element with an optional list marker, text run and nested children."""
    parts = ['<one:OE>']
    if bullet:
        parts.append('<one:List><one:Bullet bullet="2" fontSize="11.0" /></one:List>')
    elif number:
        parts.append('<one:List><one:Number numberSequence="0" numberFormat="##." /></one:List>')
    if text is not None:
        style_attr = f' style="{style}"' if style else ''
        parts.append(f'<one:T{style_attr}><![CDATA[{text}]]></one:T>')
    parts.append(extra)
    if children:
        parts.append(f'<one:OEChildren>{children}</one:OEChildren>')
    parts.append('</one:OE>')
    return ''.join(parts)


def image(data=None, image_format='png', callback_id=None):
    inner = ''
    if data is not None:
        inner += f'<one:Data>{data}</one:Data>'
    if callback_id is not None:
        inner += f'<one:CallbackID callbackID="{callback_id}" />'
    return f'<one:Image format="{image_format}">{inner}</one:Image>'


def table(*rows):
    """Build a Table from rows of cell texts."""
    xml = ['<one:Table>']
    for row in rows:
        xml.append('<one:Row>')
        for cell in row:
            xml.append(f'<one:Cell><one:OEChildren>{oe(cell)}</one:OEChildren></one:Cell>')
        xml.append('</one:Row>')
    xml.append('</one:Table>')
    return ''.join(xml)


@pytest.fixture
def make_page():
    return page


@pytest.fixture
def make_oe():
    return oe


@pytest.fixture
def make_image():
    return image


@pytest.fixture
def make_table():
    return table


@pytest.fixture
def png_base64():
    return PNG_BASE64


@pytest.fixture
def assets_dir(tmp_path):
    return tmp_path / 'assets'
