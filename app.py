"""
LuneStock: Streamlit UI entry point.
"""

import streamlit as st

# Load .env first so the configured backend is used
from lunestock.utils.config import load_config, low_stock_threshold
load_config()

from lunestock.domains.inventory.errors import (
    InsufficientStockError,
    NotFoundError,
    RecordDecodeError,
    ValidationError,
)
from lunestock.domains.inventory.stock import ALL, StockOperation, filter_inventory
from lunestock.infrastructure.auth.auth_client import AuthenticationError
from lunestock.infrastructure.data.store_client import DataStoreError
from lunestock.services.backend import build_backend, build_clients
from lunestock.ui.display import (
    format_money,
    inventory_table,
    notify_error,
    products_table,
    render_bar_chart,
    render_stats,
    sales_table,
)
from lunestock.utils.logger import get_logger, setup_from_config

setup_from_config()
log = get_logger()

ACTION_ERRORS = (ValidationError, NotFoundError, RecordDecodeError, DataStoreError, AuthenticationError)

st.set_page_config(page_title="LuneStock", layout="wide")


# Clients shared by every visitor; cache_resource is process-wide
@st.cache_resource
def get_clients():
    return build_clients()


# Each browser session gets its own login and services
if "backend" not in st.session_state:
    st.session_state.backend = build_backend(get_clients())

backend = st.session_state.backend
session = backend.session


def login_page() -> None:
    st.title("LuneStock")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if submitted:
        try:
            session.login(email, password)
            st.rerun()
        except AuthenticationError as e:
            st.error(str(e))


def dashboard_page() -> None:
    st.header("Dashboard")
    try:
        view = backend.dashboard.load()
    except ACTION_ERRORS as e:
        notify_error("Loading dashboard", e)
        return
    render_stats(view.stats)
    st.subheader("Weekly sales")
    render_bar_chart(view.weekly_sales)


def products_page() -> None:
    st.header("Products")
    search = st.text_input("Search products")
    try:
        items = backend.catalog.list_products(search)
        sizes = backend.catalog.list_sizes()
        colors = backend.catalog.list_colors()
    except ACTION_ERRORS as e:
        notify_error("Loading products", e)
        return
    st.dataframe(products_table(items), use_container_width=True)

    with st.expander("New product"):
        with st.form("new_product", clear_on_submit=True):
            name = st.text_input("Name")
            description = st.text_area("Description")
            if st.form_submit_button("Save product"):
                try:
                    backend.catalog.create_product(name, description)
                    st.success("Product added")
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Adding product", e)

    if not items:
        return
    by_name = {i.product.name: i.product for i in items}
    with st.expander("Add variant"):
        with st.form("new_variant", clear_on_submit=True):
            product_name = st.selectbox("Product", list(by_name))
            size = st.selectbox("Size", [s.name for s in sizes])
            color = st.selectbox("Color", [c.name for c in colors])
            stock = st.number_input("Initial stock", min_value=0, step=1, value=0)
            if st.form_submit_button("Add variant"):
                try:
                    backend.catalog.add_variant(by_name[product_name].id, size, color, int(stock))
                    st.success("Variant added")
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Adding variant", e)

    with st.expander("Edit product"):
        product_name = st.selectbox("Product", list(by_name), key="edit_product_choice")
        product = by_name[product_name]
        with st.form("edit_product"):
            name = st.text_input("Name", product.name, key=f"edit_name_{product.id}")
            description = st.text_area(
                "Description", product.description or "", key=f"edit_description_{product.id}"
            )
            if st.form_submit_button("Save changes"):
                try:
                    backend.catalog.update_product(product.id, name, description)
                    st.success("Product updated")
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Updating product", e)


def inventory_page() -> None:
    st.header("Inventory")
    try:
        view = backend.inventory.load()
    except ACTION_ERRORS as e:
        notify_error("Loading inventory", e)
        return
    render_bar_chart(view.chart)

    c1, c2, c3, c4 = st.columns(4)
    search = c1.text_input("Search inventory")
    product = c2.selectbox("Product", [ALL] + view.options.get("products", []))
    size = c3.selectbox("Size", [ALL] + view.options.get("sizes", []))
    color = c4.selectbox("Color", [ALL] + view.options.get("colors", []))
    rows = filter_inventory(view.rows, search, product, size, color)
    st.dataframe(inventory_table(rows, low_stock_threshold()), use_container_width=True)

    if not rows:
        return
    st.subheader("Adjust stock")
    labels = {f"{r.product_name} · {r.size} / {r.color} ({r.stock})": r for r in rows}
    with st.form("adjust_stock"):
        choice = st.selectbox("Variant", list(labels))
        operation = st.radio("Operation", [op.value for op in StockOperation], horizontal=True)
        amount = st.number_input("Amount", min_value=1, step=1, value=1)
        if st.form_submit_button("Apply"):
            try:
                updated = backend.inventory.adjust_stock(labels[choice].variant, operation, int(amount))
                st.success(f"Stock is now {updated.stock}")
                st.rerun()
            except ACTION_ERRORS as e:
                notify_error("Adjusting stock", e)


def sales_page() -> None:
    st.header("Sales")
    search = st.text_input("Search sales history")
    try:
        sales = backend.sales.list_sales(search)
        items = backend.catalog.list_products()
    except ACTION_ERRORS as e:
        notify_error("Loading sales", e)
        return
    st.dataframe(sales_table(sales), use_container_width=True)

    with st.expander("Register sale", expanded=True):
        products = {i.product.name: i for i in items if i.variants}
        if not products:
            st.caption("Add products with variants first.")
        else:
            product_name = st.selectbox("Product", list(products))
            item = products[product_name]
            variants = {f"{v.size} / {v.color} ({v.stock} available)": v for v in item.variants}
            with st.form("new_sale", clear_on_submit=True):
                variant_label = st.selectbox("Variant", list(variants))
                quantity = st.number_input("Quantity", min_value=1, step=1, value=1)
                price = st.number_input("Unit price", min_value=0.0, step=0.1, value=39.9)
                st.caption(f"Total: {format_money(round(price * quantity, 2))}")
                if st.form_submit_button("Confirm sale"):
                    try:
                        backend.sales.register_sale(
                            item.product.id, variants[variant_label].id, int(quantity), str(price)
                        )
                        st.success("Sale recorded")
                        st.rerun()
                    except InsufficientStockError as e:
                        st.error(str(e))
                    except ACTION_ERRORS as e:
                        notify_error("Registering sale", e)

    if sales and products:
        with st.expander("Edit sale"):
            labels = {f"{s.date:%Y-%m-%d %H:%M} · {s.product_name} x{s.quantity}": s for s in sales}
            choice = st.selectbox("Sale", list(labels), key="edit_sale_choice")
            sale = labels[choice]
            names = list(products)
            current = sale.product_name if sale.product_name in products else names[0]
            product_name = st.selectbox("Product", names, index=names.index(current), key="edit_sale_product")
            item = products[product_name]
            variants = {f"{v.size} / {v.color} ({v.stock} available)": v for v in item.variants}
            with st.form("edit_sale"):
                variant_label = st.selectbox("Variant", list(variants))
                quantity = st.number_input("Quantity", min_value=1, step=1, value=sale.quantity)
                price = st.number_input("Unit price", min_value=0.0, step=0.1, value=float(sale.price))
                restock = st.checkbox("Correct stock for the change")
                if st.form_submit_button("Save changes"):
                    try:
                        backend.sales.edit_sale(
                            sale.id,
                            item.product.id,
                            variants[variant_label].id,
                            int(quantity),
                            str(price),
                            restock=restock,
                        )
                        st.success("Sale updated")
                        st.rerun()
                    except ACTION_ERRORS as e:
                        notify_error("Editing sale", e)

    if sales:
        with st.expander("Delete sale"):
            labels = {f"{s.date:%Y-%m-%d %H:%M} · {s.product_name} x{s.quantity}": s for s in sales}
            with st.form("delete_sale"):
                choice = st.selectbox("Sale", list(labels))
                restock = st.checkbox("Return units to stock")
                if st.form_submit_button("Delete"):
                    try:
                        backend.sales.delete_sale(labels[choice].id, restock=restock)
                        st.rerun()
                    except ACTION_ERRORS as e:
                        notify_error("Deleting sale", e)


def settings_page() -> None:
    st.header("Settings")
    sizes_tab, colors_tab = st.tabs(["Sizes", "Colors"])
    with sizes_tab:
        try:
            sizes = backend.catalog.list_sizes()
        except ACTION_ERRORS as e:
            notify_error("Loading sizes", e)
            sizes = []
        for s in sizes:
            c1, c2, c3 = st.columns([3, 1, 1])
            new_name = c1.text_input("Size", s.name, key=f"size_{s.id}", label_visibility="collapsed")
            if c2.button("Rename", key=f"rename_size_{s.id}"):
                try:
                    backend.catalog.rename_size(s.id, new_name)
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Renaming size", e)
            if c3.button("Delete", key=f"del_size_{s.id}"):
                try:
                    backend.catalog.delete_size(s.id)
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Deleting size", e)
        with st.form("new_size", clear_on_submit=True):
            name = st.text_input("New size")
            if st.form_submit_button("Add size"):
                try:
                    backend.catalog.add_size(name)
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Adding size", e)
    with colors_tab:
        try:
            colors = backend.catalog.list_colors()
        except ACTION_ERRORS as e:
            notify_error("Loading colors", e)
            colors = []
        for c in colors:
            c1, c2, c3, c4 = st.columns([3, 1, 1, 1])
            new_name = c1.text_input("Color", c.name, key=f"color_{c.id}", label_visibility="collapsed")
            new_hex = c2.color_picker("hex", c.hex, key=f"hex_{c.id}", label_visibility="collapsed")
            if c3.button("Save", key=f"save_color_{c.id}"):
                try:
                    backend.catalog.update_color(c.id, new_name, new_hex)
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Updating color", e)
            if c4.button("Delete", key=f"del_color_{c.id}"):
                try:
                    backend.catalog.delete_color(c.id)
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Deleting color", e)
        with st.form("new_color", clear_on_submit=True):
            name = st.text_input("New color")
            hex_value = st.color_picker("Hex", "#000000")
            if st.form_submit_button("Add color"):
                try:
                    backend.catalog.add_color(name, hex_value)
                    st.rerun()
                except ACTION_ERRORS as e:
                    notify_error("Adding color", e)


PAGES = {
    "Dashboard": dashboard_page,
    "Products": products_page,
    "Inventory": inventory_page,
    "Sales": sales_page,
    "Settings": settings_page,
}

if not session.is_authenticated:
    login_page()
else:
    with st.sidebar:
        st.header("LuneStock")
        user = session.user
        st.caption(f"Signed in as **{user.username or user.email}**")
        page = st.radio("Go to", list(PAGES))
        if st.button("Sign out"):
            session.logout()
            st.rerun()
    PAGES[page]()
