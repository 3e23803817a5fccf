from tailormint.notifications.templates import build_email, html_to_text, NOTIFICATION_TYPES


def test_order_placed_customer_and_tailor_variants():
    subject, html, text = build_email("order_placed", "Ada", order_id="o-1", extra={"totalAmount": 70.0})
    assert subject == "Order #o-1 Placed Successfully"
    assert "Order Confirmed" in html
    assert "Total Amount:" in text
    assert "/customer/orders/o-1" in html

    subject, html, _ = build_email("order_placed", "Kunle", order_id="o-1", extra={"audience": "tailor"})
    assert subject == "New Order Received: #o-1"
    assert "New Order Alert" in html
    assert "/tailor/orders" in html


def test_role_prefix_only_when_role_given():
    subject, _, _ = build_email("order_shipped", "Ada", order_id="o-9", extra={"recipientRole": "CUSTOMER"})
    assert subject == "[CUSTOMER] Order #o-9 Has Been Shipped"
    subject, _, _ = build_email("order_shipped", "Ada", order_id="o-9")
    assert subject == "Order #o-9 Has Been Shipped"


def test_design_subjects_use_title():
    subject, _, _ = build_email("design_approved", "Kunle", reference_id="d-1", extra={"designTitle": "Kaftan"})
    assert subject == "Design Approved: Kaftan"
    subject, _, _ = build_email("design_rejected", "Kunle", reference_id="d-1")
    assert subject == "Design Update Required: Your design"


def test_unknown_type_falls_back_to_generic_update():
    subject, html, _ = build_email("order_lost", "Ada", order_id="o-2")
    assert subject == "Update on Your Tailor Mint Order #o-2"
    assert "Order Update" in html
    subject, _, _ = build_email("order_lost", "Kunle", order_id="o-2", extra={"audience": "tailor"})
    assert subject == "Action Required: Order #o-2 Update"


def test_every_type_renders():
    for type_ in NOTIFICATION_TYPES:
        subject, html, text = build_email(type_, "Ada", order_id="o-1", reference_id="r-1")
        assert subject
        assert "Hello Ada" in text
        assert "The Tailor Mint Team" in text


def test_recipient_name_is_escaped():
    _, html, text = build_email("order_pending", "<b>Eve</b>", order_id="o-1")
    assert "<b>Eve</b>" not in html
    assert "&lt;b&gt;Eve&lt;/b&gt;" in html
    assert "<b>Eve</b>" in text


def test_html_to_text():
    text = html_to_text("<style>p{}</style><p>Hi&nbsp;there<br>next</p>\n\n\n\n<p>end</p>")
    assert text == "Hi there\nnext\n\nend"
