import streamlit as st

CORE_VALUES = (
    ("📖 Biblical Truth", "We stand on the unchanging Word of God as the foundation for life and ministry."),
    ("❤️ Love & Compassion", "We reach out to every person with the love of Christ, without distinction."),
    ("🙏 Prayer", "We believe in the power of prayer to transform lives, families and nations."),
)


def render_about():
    st.markdown(
        """
        <div class="pm-hero">
          <h1>About The Power Ministry</h1>
          <p>Discover our story, mission and the vision that drives us forward in faith.</p>
        </div>
        """,
        unsafe_allow_html=True
    )

    st.subheader("Our Story")
    st.write(
        "The Power Ministry was founded with a simple yet profound vision: to bring the life-changing "
        "message of Jesus Christ to individuals and communities around the world. What began as a small "
        "gathering of believers has grown into a vibrant community dedicated to worship, teaching, and service."
    )

    st.subheader("Our Core Values")
    for col, (title, text) in zip(st.columns(len(CORE_VALUES)), CORE_VALUES):
        col.markdown(f"**{title}**")
        col.caption(text)

    st.subheader("Our Mission Statement")
    st.info(
        "To empower believers with the truth of God's Word, equip them with spiritual tools for victorious "
        "living, and expand God's kingdom through passionate worship, prayer and service."
    )

    st.subheader("Contact Information")
    st.markdown(
        "- Email: info@powerministry.org\n"
        "- Phone: (555) 123-4567\n"
        "- Address: 123 Faith Street, Hope City, HC 12345"
    )
