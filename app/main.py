import sys
import os
import logging
import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.config import load_settings
from storefront.catalog import paginate
from storefront.checkout import invoice_lines
from storefront.errors import (
    EmptyCartError,
    IncompleteShippingError,
    MissingProductError,
    StorefrontError,
)
from storefront.pricing import TAX_RATE
from storefront.service import Storefront

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("storefront.app")

SETTINGS_PATH = "data/settings.json"

PAGE_SIZE = 60

PAGES = ["🏪 Catalog", "🛒 Cart", "💳 Checkout", "🧾 Invoice", "👤 Account"]


# ============ Cached resources ============
@st.cache_resource
def get_storefront() -> Storefront:
    return Storefront.from_settings(load_settings(SETTINGS_PATH))


settings = load_settings(SETTINGS_PATH)

st.set_page_config(
    page_title=settings.page_title,
    page_icon="🚗",
    layout="wide",
    initial_sidebar_state="expanded",
)

shop = get_storefront()
catalog = shop.catalog


def format_price(amount: int) -> str:
    return f"{settings.currency} {amount:,}"


def go_to(page: str):
    st.session_state.next_page = page
    st.rerun()


def render_breakdown(breakdown):
    st.caption(f"Subtotal: {format_price(breakdown.subtotal)}")
    st.caption(f"Discount: {format_price(breakdown.discount)}")
    st.caption(f"Tax ({TAX_RATE * 100:.1f}%): {format_price(breakdown.tax)}")
    st.markdown(f"### Total: **{format_price(breakdown.total)}**")


def priced_cart():
    """Current cart and its breakdown; a dangling product id stops the page"""
    entries = shop.cart.get()
    try:
        return entries, shop.pricing.compute(entries)
    except MissingProductError as e:
        logger.error(f"Cart references unknown product {e.product_id}")
        st.exception(e)
        st.stop()


# ============ HEADER ============
if "next_page" in st.session_state:
    st.session_state.page = st.session_state.pop("next_page")

st.title(f"🚗 {settings.page_title}")

with st.sidebar:
    st.header("Navigation")
    page = st.radio("Section", PAGES, key="page", label_visibility="collapsed")

    st.divider()
    st.metric("🛒 Items in cart", shop.cart_count())
    if shop.ui_state["last_order_id"]:
        st.caption(
            f"Last order: {shop.ui_state['last_order_id']} "
            f"({format_price(shop.ui_state['last_order_total'])})"
        )

    session = shop.accounts.current()
    if session.is_some():
        st.caption(f"Welcome, {session.get_or_else(None).username}")
        if st.button("Logout", key="logout"):
            shop.accounts.logout()
            st.rerun()
    else:
        st.caption("Not logged in")


# ============ PAGE: CATALOG ============
if page == "🏪 Catalog":
    st.header("🏪 Parts catalog")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        brand = st.selectbox("Brand", ["", *catalog.brands()], format_func=lambda b: b or "All brands")
    with col2:
        model = st.selectbox(
            "Model", ["", *catalog.models(brand)], format_func=lambda m: m or "All models"
        )
    with col3:
        part = st.selectbox(
            "Part", ["", *catalog.parts(brand, model)], format_func=lambda p: p or "All parts"
        )
    with col4:
        year = st.selectbox("Year", ["", *catalog.years()], format_func=lambda y: str(y) if y else "Any year")

    query = st.text_input("🔍 Search", placeholder="e.g. civic brakes")

    found = tuple(catalog.search(brand=brand, model=model, part=part, year=year, query=query))
    st.info(f"Products found: **{len(found)}**")
    st.divider()

    if not found:
        st.warning("No products match the chosen filters.")
    else:
        page_no = 1
        if len(found) > PAGE_SIZE:
            pages = -(-len(found) // PAGE_SIZE)
            page_no = st.number_input("Page", min_value=1, max_value=pages, value=1, step=1)
        shown, pages = paginate(found, int(page_no), PAGE_SIZE)
        first = (int(page_no) - 1) * PAGE_SIZE + 1
        st.caption(f"Showing {first}-{first + len(shown) - 1} of {len(found)} (page {int(page_no)} of {pages})")
        for p in shown:
            cols = st.columns([5, 2, 2, 2])
            with cols[0]:
                st.markdown(f"**{p.name}**")
                st.caption(p.image)
            with cols[1]:
                st.write(format_price(p.price))
            with cols[2]:
                if st.button("Add to cart", key=f"add_{p.id}"):
                    shop.cart.add(p.id)
                    st.toast(f"Added {p.name} to cart")
            with cols[3]:
                with st.popover("Details"):
                    st.text(catalog.describe(p))


# ============ PAGE: CART ============
elif page == "🛒 Cart":
    st.header("🛒 Your cart")

    entries, breakdown = priced_cart()
    if not entries:
        st.info("Your cart is empty.")
    else:
        for idx, entry in enumerate(entries, 1):
            product = catalog.get(entry.product_id)
            cols = st.columns([1, 5, 2, 2, 2, 1])
            cols[0].write(idx)
            cols[1].write(f"**{product.name}**")
            cols[2].write(format_price(product.price))
            with cols[3]:
                qty = st.number_input(
                    "Quantity",
                    min_value=1,
                    value=entry.quantity,
                    key=f"qty_{entry.product_id}",
                    label_visibility="collapsed",
                )
                if qty != entry.quantity:
                    shop.cart.set_quantity(entry.product_id, qty)
                    st.rerun()
            cols[4].write(format_price(product.price * entry.quantity))
            with cols[5]:
                if st.button("🗑️", key=f"remove_{entry.product_id}"):
                    shop.cart.remove(entry.product_id)
                    st.rerun()

        st.divider()
        render_breakdown(breakdown)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Check Out", type="primary", use_container_width=True):
                go_to("💳 Checkout")
        with col2:
            if st.session_state.get("confirm_clear"):
                st.warning("Clear all items from cart?")
                if st.button("Yes, clear", key="clear_yes"):
                    shop.cart.clear()
                    st.session_state.confirm_clear = False
                    st.rerun()
            elif st.button("Clear All", use_container_width=True):
                st.session_state.confirm_clear = True
                st.rerun()


# ============ PAGE: CHECKOUT ============
elif page == "💳 Checkout":
    st.header("💳 Checkout")

    entries, breakdown = priced_cart()
    if not entries:
        st.info("Cart is empty")
    else:
        rows = [
            {
                "#": idx,
                "Product": catalog.get(e.product_id).name,
                "Qty": e.quantity,
                "Line": format_price(catalog.get(e.product_id).price * e.quantity),
            }
            for idx, e in enumerate(entries, 1)
        ]
        st.table(rows)
        render_breakdown(breakdown)

    with st.form("checkout-form"):
        st.subheader("Shipping details")
        name = st.text_input("Full name", key="ship-name")
        address = st.text_area("Address", key="ship-address")
        phone = st.text_input("Phone", key="ship-phone")
        submitted = st.form_submit_button("Confirm order", type="primary")

    if submitted:
        try:
            order = shop.checkout.confirm(
                {"ship-name": name, "ship-address": address, "ship-phone": phone}
            )
        except (EmptyCartError, IncompleteShippingError) as e:
            st.error(str(e))
        except StorefrontError as e:
            logger.exception("Checkout failed")
            st.exception(e)
        else:
            st.success(f"Order {order.id} confirmed! Redirecting to invoice...")
            go_to("🧾 Invoice")


# ============ PAGE: INVOICE ============
elif page == "🧾 Invoice":
    st.header("🧾 Invoice")

    last = shop.invoice.get_last()
    if last.is_none():
        st.info("No recent invoice available.")
    else:
        order = last.get_or_else(None)
        st.subheader(f"Invoice: {order.id}")
        st.write(f"Date: {order.date}")
        st.write(f"**Customer:** {order.shipping_name}")
        st.write(f"**Address:** {order.shipping_address}")
        st.write(f"**Phone:** {order.shipping_phone}")

        st.table(
            [
                {
                    "#": idx,
                    "Product": name,
                    "Qty": qty,
                    "Unit": format_price(unit),
                    "Line": format_price(line),
                }
                for idx, name, qty, unit, line in invoice_lines(order)
            ]
        )
        render_breakdown(order.breakdown)
        st.caption("Thank you for shopping with us.")


# ============ PAGE: ACCOUNT ============
elif page == "👤 Account":
    st.header("👤 Account")

    tab1, tab2 = st.tabs(["Login", "Register"])

    with tab1:
        with st.form("login-form", clear_on_submit=True):
            username = st.text_input("Username", key="login-username")
            password = st.text_input("Password", type="password", key="login-password")
            if st.form_submit_button("Login"):
                result = shop.accounts.login(username, password)
                if result.is_right:
                    st.success("Login successful")
                    st.rerun()
                else:
                    st.error(result.error_or_none())

    with tab2:
        with st.form("register-form", clear_on_submit=True):
            fullname = st.text_input("Full name", key="reg-name")
            email = st.text_input("Email", key="reg-email")
            reg_username = st.text_input("Username", key="reg-username")
            reg_password = st.text_input("Password", type="password", key="reg-password")
            dob = st.date_input("Date of birth", value=None, key="reg-dob")
            if st.form_submit_button("Register"):
                result = shop.accounts.register(
                    reg_username,
                    reg_password,
                    email,
                    fullname,
                    dob.isoformat() if dob else "",
                )
                if result.is_right:
                    st.success("Registration successful. Please log in.")
                else:
                    st.error(result.error_or_none())
