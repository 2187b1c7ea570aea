"""ADF and issue builders shared by the tests."""


def text(value):
    return {'type': 'text', 'text': value}


def paragraph(*children):
    return {'type': 'paragraph', 'content': list(children)}


def doc(*blocks):
    return {'type': 'doc', 'version': 1, 'content': list(blocks)}


def business_value_doc(value):
    """Description laid out like the ticket template: heading, body, next heading."""
    return doc(
        {'type': 'heading', 'attrs': {'level': 2}, 'content': [text('Business value')]},
        paragraph(text(value)),
        {'type': 'heading', 'attrs': {'level': 2}, 'content': [text('Customer value')]},
        paragraph(text('Customers are happier')),
    )


def issue(key, summary, description):
    return {'key': key, 'fields': {'summary': summary, 'description': description}}
