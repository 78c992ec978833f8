"""
Usage:
```
$ streamlit run imagegen/frontend.py
```

Then access `http://localhost:8501`. The proxy must be running, see
:mod:`imagegen.main`.
"""

import streamlit as st

from imagegen.catalog import MODELS
from imagegen.view import MAX_GALLERY_SIZE, FormState, GeneratorView

FORM_KEYS = ("model", "prompt", "negative_prompt", "width", "height", "steps", "guidance_scale")


def _write_form(form: FormState) -> None:
    for key, value in form.to_payload().items():
        st.session_state[key] = value


def _read_form(view: GeneratorView) -> None:
    values = {key: st.session_state[key] for key in FORM_KEYS}
    view.form = FormState(**values)


def get_view() -> GeneratorView:
    if "view" not in st.session_state:
        view = GeneratorView()
        st.session_state.view = view
        _write_form(view.form)
    return st.session_state.view


def on_model_change() -> None:
    view = get_view()
    _read_form(view)
    view.select_model(st.session_state.model)
    _write_form(view.form)


def on_sample(index: int) -> None:
    view = get_view()
    st.session_state.prompt = view.apply_sample(index)


def on_submit() -> None:
    view = get_view()
    _read_form(view)
    view.submit()


st.set_page_config(page_title="Hugging Face Image Generator", page_icon="🤗", layout="wide")
view = get_view()

st.title("🤗 Hugging Face Image Generator")
st.markdown("Generate images using FLUX.1-schnell and Stable Diffusion XL models")

form_col, gallery_col = st.columns(2)

with form_col:
    st.header("Generate Image")

    st.selectbox(
        "Model",
        options=list(MODELS),
        format_func=lambda model_id: MODELS[model_id].display_name,
        key="model",
        on_change=on_model_change,
    )

    st.text_area("Prompt", key="prompt", placeholder="Describe the image you want to generate...", height=100)
    st.caption("Sample prompts:")
    for index, sample in enumerate(view.sample_prompts):
        st.button(f"• {sample}", key=f"sample-{index}", on_click=on_sample, args=(index,))

    st.text_input("Negative Prompt (Optional)", key="negative_prompt", placeholder="What to avoid in the image...")

    width_col, height_col = st.columns(2)
    width_col.number_input("Width", key="width", min_value=256, max_value=1024, step=64)
    height_col.number_input("Height", key="height", min_value=256, max_value=1024, step=64)

    steps_col, guidance_col = st.columns(2)
    steps_col.number_input("Steps", key="steps", min_value=1, max_value=50, step=1)
    guidance_col.number_input("Guidance Scale", key="guidance_scale", min_value=1.0, max_value=20.0, step=0.1)

    st.button(
        "Generating..." if view.is_loading else "Generate Image",
        key="submit",
        type="primary",
        disabled=view.is_loading or not st.session_state.prompt.strip(),
        on_click=on_submit,
    )

    if view.error:
        st.error(view.error)

with gallery_col:
    st.header(f"Gallery ({len(view.images)}/{MAX_GALLERY_SIZE})")

    if not view.images:
        st.markdown("🎨 No images generated yet")
        st.caption("Generate your first image to see it here!")

    for image in view.images:
        st.image(image.data, caption=image.prompt)
        st.caption(f"{image.model.upper()} · {image.timestamp.strftime('%H:%M:%S')}")
        filename, data, media_type = view.download(image.id)
        st.download_button("Download", data=data, file_name=filename, mime=media_type, key=f"download-{image.id}")
