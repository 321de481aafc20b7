# ui/widgets.py
"""
Streamlit widgets bound to a configuration session.

Every widget gets its value from the store on each run and writes changes
back through ``session.edit`` in its on_change callback, so cascades run
before the next rerun renders anything.
"""

import streamlit as st

from state.models import ConfigGroup


def widget_key(group, field):
    return f"cfg_{ConfigGroup(group).value}_{field}"


def _write_back(session, group, field, key):
    session.edit(group, {field: st.session_state[key]})


def _bind(session, group, field):
    key = widget_key(group, field)
    st.session_state[key] = getattr(session.store.get(group), field)
    return key, dict(on_change=_write_back, args=(session, group, field, key))


def bound_text_input(session, group, field, label, **kwargs):
    key, callback = _bind(session, group, field)
    return st.text_input(label, key=key, **callback, **kwargs)


def bound_text_area(session, group, field, label, **kwargs):
    key, callback = _bind(session, group, field)
    return st.text_area(label, key=key, **callback, **kwargs)


def bound_checkbox(session, group, field, label, **kwargs):
    key, callback = _bind(session, group, field)
    return st.checkbox(label, key=key, **callback, **kwargs)


def bound_selectbox(session, group, field, label, options, **kwargs):
    """Select box over ``options``; a stored value missing from them is still shown."""
    options = list(options)
    current = getattr(session.store.get(group), field)
    if current and current not in options:
        options.append(current)
    if not options:
        st.selectbox(label, ["No options available"], disabled=True, key=f"{widget_key(group, field)}_empty")
        return None
    key, callback = _bind(session, group, field)
    if not current:
        st.session_state[key] = options[0]
    return st.selectbox(label, options, key=key, **callback, **kwargs)


def _toggle_check(session, check_id, kind, key):
    session.toggle_check(check_id, st.session_state[key], kind)


def check_checkbox(session, check, selected_ids):
    """Checkbox for one dormant/compliance check, wired to the check-selection engine."""
    key = f"check_{check.kind.value}_{check.id}"
    st.session_state[key] = check.id in selected_ids
    return st.checkbox(
        check.name,
        key=key,
        disabled=check.is_disabled,
        on_change=_toggle_check,
        args=(session, check.id, check.kind, key),
    )


def render_notice(session):
    """Show the session notice with a dismiss button."""
    notice = session.notice
    if notice is None:
        return

    show = {
        "success": st.success,
        "warning": st.warning,
        "error": st.error,
    }.get(notice.level, st.info)

    col1, col2 = st.columns([9, 1])
    with col1:
        show(notice.message)
    with col2:
        if st.button("✖", key="dismiss_notice", help="Dismiss"):
            session.dismiss_notice()
            st.rerun()
