"""
Streamlit UI for the fundraising platform.

Features:
- Shop with live per-unit margins and a cart
- Dashboard: goal progress, earnings split, volumes per product
- Leaderboard and reward milestones
- Admin: paper voucher encoding and order log
"""
import streamlit as st
import pandas as pd
from datetime import datetime

from fundraise.config.logging_config import setup_logging
from fundraise.config.settings import get_settings
from fundraise.data.build_catalog import load_catalog
from fundraise.engine.errors import InvalidOrderError, UpstreamPersistenceError
from fundraise.engine.formatting import format_euro, format_percent
from fundraise.engine.models import LineItem
from fundraise.services.fundraiser_service import FundraiserSession
from fundraise.services.order_recorder import build_recorder


st.set_page_config(
    page_title="Fundraise",
    layout="wide",
    initial_sidebar_state="collapsed"
)

LEADERBOARD = [
    ("Classe de 6e A", 1520),
    ("Scouts de Namur", 1210),
    ("Club de volley U14", 980),
]


@st.cache_resource
def get_catalog():
    """Get cached catalog instance."""
    settings = get_settings()
    setup_logging(settings.log_level)
    return load_catalog(settings)


try:
    settings = get_settings()
    catalog = get_catalog()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()

# One ledger per browser session
if 'fundraiser' not in st.session_state:
    st.session_state.fundraiser = FundraiserSession.from_settings(
        catalog, settings, recorder=build_recorder(settings)
    )
fundraiser: FundraiserSession = st.session_state.fundraiser


st.title("Fundraise")
st.caption(f"Plateforme de ventes solidaires | {fundraiser.group_name} | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3, tab4 = st.tabs(["🛒 Boutique", "📊 Tableau de bord", "🏆 Classements", "👥 Admin groupe"])


# ============================================================================
# TAB 1: SHOP
# ============================================================================
with tab1:
    col1, col2 = st.columns([1.8, 1.2], gap="large")
    volumes = fundraiser.ledger.snapshot()

    with col1:
        st.subheader("Catalogue")
        st.caption("Marge dynamique par volume")

        for row in fundraiser.pricing.catalog_view(volumes):
            with st.container(border=True):
                c_img, c_info = st.columns([1, 3])
                with c_img:
                    if row['image']:
                        st.image(row['image'], use_container_width=True)
                with c_info:
                    st.markdown(f"**{row['name']}** · :green[{format_euro(row['price'])}]")
                    st.caption(f"{row['description']} Coût: {format_euro(row['cost'])}")
                    m1, m2, m3 = st.columns(3)
                    m1.metric("Marge plateforme", format_euro(row['platformRate']))
                    m2.metric("Marge groupe", format_euro(row['groupRate']))
                    m3.metric("Volume", row['volume'])
                    if row['nextTierAt'] is not None:
                        st.caption(f"Prochain palier à {row['nextTierAt']} ventes")
                    if st.button("➕ Ajouter au panier", key=f"add_{row['id']}"):
                        fundraiser.add_to_cart(row['id'])
                        st.rerun()

    with col2:
        st.subheader("Panier")

        with st.container(border=True):
            if fundraiser.cart.is_empty:
                st.info("Votre panier est vide.")
            else:
                quote = fundraiser.cart_quote()
                for line in quote.lines:
                    c_name, c_minus, c_qty, c_plus = st.columns([4, 1, 1, 1])
                    c_name.markdown(f"**{line.name}**  \n{format_euro(line.unit_price)} × {line.quantity}")
                    if c_minus.button("➖", key=f"minus_{line.product_id}"):
                        fundraiser.update_qty(line.product_id, -1)
                        st.rerun()
                    c_qty.write(line.quantity)
                    if c_plus.button("➕", key=f"plus_{line.product_id}"):
                        fundraiser.update_qty(line.product_id, 1)
                        st.rerun()

                st.divider()
                m1, m2 = st.columns(2)
                m1.metric("Total", format_euro(quote.total))
                m2.metric("Gain du groupe", format_euro(quote.group_margin))

                with st.expander("🔍 Détail du calcul"):
                    for line in quote.lines:
                        st.caption(f"**{line.name}**")
                        st.text(line.get_trace_text())

                if st.button("💳 Payer (simulation)", type="primary", use_container_width=True):
                    fundraiser.checkout()
                    st.toast("Commande enregistrée")
                    st.rerun()

        with st.container(border=True):
            st.markdown("##### FAQ rapide")
            st.markdown(
                "- Les marges se recalculent automatiquement selon le volume total par produit.\n"
                "- Les bons papier peuvent être encodés dans l'onglet Admin.\n"
                "- Le paiement ici est une simulation."
            )


# ============================================================================
# TAB 2: DASHBOARD
# ============================================================================
with tab2:
    col1, col2 = st.columns([2, 1], gap="large")
    totals = fundraiser.totals()

    with col1:
        st.subheader("Tableau de bord")
        st.caption(f"Objectif: {format_euro(fundraiser.goal)}")

        m1, m2, m3 = st.columns(3)
        m1.metric("Chiffre d'affaires", format_euro(totals.revenue))
        m2.metric("Gain du groupe", format_euro(totals.group_margin))
        m3.metric("Marge plateforme", format_euro(totals.platform_margin))

        st.progress(totals.progress, text=f"Avancement vers l'objectif ({format_percent(totals.progress)})")

        st.markdown("##### Volumes par produit")
        volume_df = pd.DataFrame([
            {
                'Produit': row['name'],
                'Ventes': row['volume'],
                'Marge groupe/u': format_euro(row['groupRate']),
            }
            for row in fundraiser.volumes()
        ])
        st.dataframe(volume_df, use_container_width=True, hide_index=True)

    with col2:
        with st.container(border=True):
            st.markdown("##### Paramètres du groupe")
            name = st.text_input("Nom", value=fundraiser.group_name)
            goal = st.number_input("Objectif (€)", min_value=0.0, value=float(fundraiser.goal), step=100.0)
            if name != fundraiser.group_name or goal != fundraiser.goal:
                fundraiser.rename_group(name)
                fundraiser.set_goal(goal)
                st.rerun()

        with st.container(border=True):
            st.markdown("##### Lien du mini-shop")
            st.caption("Partagez ce lien/QR avec vos acheteurs.")
            st.code(fundraiser.shop_url(), language=None)


# ============================================================================
# TAB 3: LEADERBOARD
# ============================================================================
with tab3:
    col1, col2 = st.columns(2, gap="large")

    with col1:
        st.subheader("Top groupes (mois)")
        for rank, (name, amount) in enumerate(LEADERBOARD, start=1):
            with st.container(border=True):
                c_rank, c_name, c_amount = st.columns([1, 4, 2])
                c_rank.markdown(f"### {rank}")
                c_name.markdown(f"**{name}**  \nTotal collecté")
                c_amount.markdown(f"**{format_euro(amount)}**")

    with col2:
        st.subheader("Récompenses & paliers")
        reached = {units for units, _ in fundraiser.reached_milestones()}
        for units, reward in fundraiser.milestones:
            mark = "✅" if units in reached else "⬜"
            st.markdown(f"{mark} {units} ventes → {reward}")


# ============================================================================
# TAB 4: ADMIN
# ============================================================================
with tab4:
    col1, col2 = st.columns([2, 1], gap="large")

    with col1:
        st.subheader("Encodage d'un bon papier")

        buyer = st.text_input("Acheteur (nom)", key="voucher_buyer")
        st.caption("Téléversement du bon (photo) : OCR bientôt")

        if 'voucher_rows' not in st.session_state:
            st.session_state.voucher_rows = pd.DataFrame([{'Produit': catalog.ids()[0], 'Quantité': 1}])

        edited_df = st.data_editor(
            st.session_state.voucher_rows,
            use_container_width=True,
            num_rows="dynamic",
            column_config={
                "Produit": st.column_config.SelectboxColumn("Produit", options=catalog.ids(), required=True),
                "Quantité": st.column_config.NumberColumn("Quantité", min_value=1, step=1, required=True),
            },
            hide_index=True,
            key="voucher_editor"
        )

        if st.button("✔️ Enregistrer le bon papier", type="primary"):
            items = [
                LineItem(product_id=row['Produit'], quantity=int(row['Quantité']))
                for _, row in edited_df.dropna().iterrows()
            ]
            try:
                record = fundraiser.encode_paper_order(buyer, items)
                st.success(f"Bon {record.id[:8]} enregistré ({record.unit_count} unités)")
                del st.session_state.voucher_rows
                st.rerun()
            except InvalidOrderError as e:
                st.error(str(e))
            except UpstreamPersistenceError as e:
                st.warning(f"Bon enregistré localement, envoi échoué: {e}")

        if len(fundraiser.order_log):
            st.markdown("##### Bons encodés")
            log_df = pd.DataFrame([
                {
                    'ID': record.id[:8],
                    'Acheteur': record.buyer,
                    'Articles': ", ".join(f"{i.product_id} × {i.quantity}" for i in record.items),
                    'Date': record.created_at[:19],
                }
                for record in fundraiser.order_log
            ])
            st.dataframe(log_df, use_container_width=True, hide_index=True)

    with col2:
        with st.container(border=True):
            st.markdown("##### Bonnes pratiques")
            st.markdown(
                "- Encoder les commandes papier en fin de journée.\n"
                "- Conserver les originaux 30 jours pour contrôle.\n"
                "- Vérifier les paliers atteints chaque semaine."
            )
